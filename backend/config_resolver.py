"""
Configuration Resolver
======================
Merges stored configuration overrides with the built-in defaults.

Each of the five sections is resolved on its own:
  - absent (or null) override  -> built-in default
  - present override           -> structurally validated; list elements that
                                  fail validation are dropped
  - empty or invalid result    -> built-in default for that section only

A malformed section never affects the other four, and the resolved
configuration always has at least one state and one tax class.

Usage:
    overrides = config_store.load_entries()
    rate_config = resolve(overrides)
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from config import get_logger
from rate_config import (
    CONFIG_KEYS,
    DEFAULT_RATE_CONFIG,
    INFO_SECTIONS,
    INSURANCE_TYPES,
    SOCIAL_INSURANCE,
    STATES,
    TAX_CLASSES,
    TAX_SETTINGS,
    InfoSection,
    RateConfiguration,
    SocialInsuranceRate,
    SocialInsuranceRates,
    StateRate,
    TaxClass,
    TaxSettings,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class SectionResult:
    """
    Outcome of validating one section override.

    Attributes:
        key: Section key (one of CONFIG_KEYS)
        value: Parsed section value (the default when not accepted)
        accepted: True if the override was adopted
        reason: Why the override was rejected, None when accepted
    """
    key: str
    value: Any
    accepted: bool
    reason: Optional[str] = None


# ─── Primitive checks ────────────────────────────────────────────────────────


# Larger configured amounts or rates cannot be rounded to cents within Decimal precision
MAX_CONFIG_NUMBER = 1_000_000_000


def _is_number(value) -> bool:
    # bool is an int subclass but never a valid rate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and abs(value) <= MAX_CONFIG_NUMBER
    except OverflowError:
        # JSON integers are unbounded and may not convert to float
        return False


def _is_str(value) -> bool:
    return isinstance(value, str)


def _unique_by_key(items: list) -> tuple:
    """Drop entries whose key was already seen (first one wins)."""
    seen = set()
    unique = []
    for item in items:
        if item.key in seen:
            continue
        seen.add(item.key)
        unique.append(item)
    return tuple(unique)


# ═══════════════════════════════════════════════════════════════════════════════
# SECTION PARSERS
# Each parser returns the parsed section, or None if nothing usable remains.
# ═══════════════════════════════════════════════════════════════════════════════


def _parse_state(item) -> Optional[StateRate]:
    if not isinstance(item, dict):
        return None
    if not (_is_str(item.get("value")) and _is_str(item.get("label"))):
        return None
    if not _is_number(item.get("churchTaxRate")):
        return None
    return StateRate(item["value"], item["label"], item["churchTaxRate"])


def _parse_states(value) -> Optional[tuple]:
    if not isinstance(value, list):
        return None
    parsed = [state for state in map(_parse_state, value) if state is not None]
    return _unique_by_key(parsed) or None


def _parse_tax_class(item) -> Optional[TaxClass]:
    if not isinstance(item, dict):
        return None
    if not all(_is_str(item.get(field)) for field in ("value", "label", "description")):
        return None
    extra = item.get("extraDeductionPercent")
    allowance = item.get("allowanceAmount")
    return TaxClass(
        key=item["value"],
        label=item["label"],
        description=item["description"],
        extra_deduction_percent=extra if _is_number(extra) else 0,
        allowance_amount=allowance if _is_number(allowance) else 0,
    )


def _parse_tax_classes(value) -> Optional[tuple]:
    if not isinstance(value, list):
        return None
    parsed = [tax_class for tax_class in map(_parse_tax_class, value) if tax_class is not None]
    return _unique_by_key(parsed) or None


def _parse_social_insurance(value) -> Optional[SocialInsuranceRates]:
    # All five insurance types must be valid, otherwise the whole section is rejected
    if not isinstance(value, dict):
        return None
    rates = {}
    for insurance_type in INSURANCE_TYPES:
        entry = value.get(insurance_type)
        if not isinstance(entry, dict):
            return None
        if not (_is_str(entry.get("label")) and _is_number(entry.get("employeeRate"))):
            return None
        rates[insurance_type] = SocialInsuranceRate(entry["label"], entry["employeeRate"])
    return SocialInsuranceRates(**rates)


def _parse_info_section(item) -> Optional[InfoSection]:
    if not isinstance(item, dict):
        return None
    if not (_is_str(item.get("id")) and _is_str(item.get("title"))):
        return None
    if not isinstance(item.get("items"), list):
        return None
    items = tuple(text for text in item["items"] if _is_str(text))
    return InfoSection(item["id"], item["title"], items)


def _parse_info_sections(value) -> Optional[tuple]:
    if not isinstance(value, list):
        return None
    parsed = [section for section in map(_parse_info_section, value) if section is not None]
    return _unique_by_key(parsed) or None


def _parse_tax_settings(value) -> Optional[TaxSettings]:
    if not isinstance(value, dict):
        return None
    fields = ("basicAllowance", "singleParentAllowance", "marriedAllowanceMultiplier")
    if not all(_is_number(value.get(field)) for field in fields):
        return None
    return TaxSettings(
        basic_allowance=value["basicAllowance"],
        single_parent_allowance=value["singleParentAllowance"],
        married_allowance_multiplier=value["marriedAllowanceMultiplier"],
    )


# Section key -> (parser, attribute on RateConfiguration)
_SECTION_PARSERS: dict[str, tuple[Callable[[Any], Any], str]] = {
    STATES: (_parse_states, "states"),
    TAX_CLASSES: (_parse_tax_classes, "tax_classes"),
    SOCIAL_INSURANCE: (_parse_social_insurance, "social_insurance"),
    INFO_SECTIONS: (_parse_info_sections, "info_sections"),
    TAX_SETTINGS: (_parse_tax_settings, "tax_settings"),
}


# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════════


def parse_section(key: str, value) -> SectionResult:
    """
    Validate one section override.

    Args:
        key: Section key, must be one of CONFIG_KEYS
        value: Raw override value (decoded JSON)

    Returns:
        SectionResult; on rejection its value is the built-in default.

    Raises:
        KeyError: if key is not a known section
    """
    parser, attribute = _SECTION_PARSERS[key]
    default = getattr(DEFAULT_RATE_CONFIG, attribute)

    if value is None:
        return SectionResult(key, default, accepted=False, reason="no override")

    parsed = parser(value)
    if parsed is None:
        return SectionResult(key, default, accepted=False, reason="invalid or empty override")
    return SectionResult(key, parsed, accepted=True)


def resolve_sections(overrides: Optional[dict] = None) -> dict[str, SectionResult]:
    """Validate every section independently, keyed by section key."""
    overrides = overrides or {}
    results = {}
    for key in CONFIG_KEYS:
        result = parse_section(key, overrides.get(key))
        if not result.accepted and key in overrides and overrides[key] is not None:
            logger.warning("Ignoring %s override (%s); using defaults", key, result.reason)
        results[key] = result
    return results


def resolve(overrides: Optional[dict] = None) -> RateConfiguration:
    """
    Build the effective RateConfiguration from stored overrides.

    Args:
        overrides: Partial mapping of section key -> raw value. Unknown keys
                   are ignored.

    Returns:
        RateConfiguration with every section either adopted from the
        override or taken from the built-in defaults.
    """
    results = resolve_sections(overrides)
    return RateConfiguration(
        **{attribute: results[key].value for key, (_, attribute) in _SECTION_PARSERS.items()}
    )
