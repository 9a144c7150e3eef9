"""
Rate Configuration Module
=========================
Data model and built-in defaults for the rate tables the calculator runs on:
federal states with their church-tax rate, tax classes, social-insurance
employee rates, base tax settings and the informational text shown next to
the calculator form.

The defaults are one immutable value built at import time. Overrides stored
by the admin surface are merged onto it by config_resolver.resolve().

Wire format (JSON, as stored and as sent to clients) uses the camelCase keys
listed in CONFIG_KEYS; to_dict() produces it.
"""

from dataclasses import dataclass
from typing import Optional


# ─── Section Keys ────────────────────────────────────────────────────────────

STATES = "states"
TAX_CLASSES = "taxClasses"
SOCIAL_INSURANCE = "socialInsurance"
INFO_SECTIONS = "infoSections"
TAX_SETTINGS = "taxSettings"

CONFIG_KEYS = (STATES, TAX_CLASSES, SOCIAL_INSURANCE, INFO_SECTIONS, TAX_SETTINGS)

INSURANCE_TYPES = ("pension", "health", "care", "unemployment", "solidarity")


# ═══════════════════════════════════════════════════════════════════════════════
# DATA MODEL
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StateRate:
    """A federal state (Bundesland) and its church-tax rate in percent."""
    key: str
    label: str
    church_tax_rate: float

    def to_dict(self) -> dict:
        return {"value": self.key, "label": self.label, "churchTaxRate": self.church_tax_rate}


@dataclass(frozen=True)
class TaxClass:
    """
    A tax class (Steuerklasse).

    Attributes:
        key: Class identifier, "1".."6" for the statutory classes
        label: Display label
        description: Short explanation shown in the form
        extra_deduction_percent: Discount applied to the monthly income tax
        allowance_amount: Extra annual allowance subtracted from taxable income
    """
    key: str
    label: str
    description: str
    extra_deduction_percent: float = 0
    allowance_amount: float = 0

    def to_dict(self) -> dict:
        return {
            "value": self.key,
            "label": self.label,
            "description": self.description,
            "extraDeductionPercent": self.extra_deduction_percent,
            "allowanceAmount": self.allowance_amount,
        }


@dataclass(frozen=True)
class SocialInsuranceRate:
    label: str
    employee_rate: float

    def to_dict(self) -> dict:
        return {"label": self.label, "employeeRate": self.employee_rate}


@dataclass(frozen=True)
class SocialInsuranceRates:
    """Employee rates (percent) per insurance type."""
    pension: SocialInsuranceRate
    health: SocialInsuranceRate
    care: SocialInsuranceRate
    unemployment: SocialInsuranceRate
    solidarity: SocialInsuranceRate

    def rate(self, insurance_type: str) -> SocialInsuranceRate:
        return getattr(self, insurance_type)

    def to_dict(self) -> dict:
        return {name: self.rate(name).to_dict() for name in INSURANCE_TYPES}


@dataclass(frozen=True)
class TaxSettings:
    """Annual allowances feeding the tax-class switch."""
    basic_allowance: float
    single_parent_allowance: float
    married_allowance_multiplier: float

    def to_dict(self) -> dict:
        return {
            "basicAllowance": self.basic_allowance,
            "singleParentAllowance": self.single_parent_allowance,
            "marriedAllowanceMultiplier": self.married_allowance_multiplier,
        }


@dataclass(frozen=True)
class InfoSection:
    key: str
    title: str
    items: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"id": self.key, "title": self.title, "items": list(self.items)}


@dataclass(frozen=True)
class RateConfiguration:
    """Fully resolved rate tables. Every list is non-empty."""
    states: tuple[StateRate, ...]
    tax_classes: tuple[TaxClass, ...]
    social_insurance: SocialInsuranceRates
    info_sections: tuple[InfoSection, ...]
    tax_settings: TaxSettings

    def find_state(self, key: str) -> Optional[StateRate]:
        return next((s for s in self.states if s.key == key), None)

    def find_tax_class(self, key: str) -> Optional[TaxClass]:
        return next((c for c in self.tax_classes if c.key == key), None)

    def section(self, key: str):
        """Return the wire-format value of one section."""
        if key == STATES:
            return [s.to_dict() for s in self.states]
        if key == TAX_CLASSES:
            return [c.to_dict() for c in self.tax_classes]
        if key == SOCIAL_INSURANCE:
            return self.social_insurance.to_dict()
        if key == INFO_SECTIONS:
            return [s.to_dict() for s in self.info_sections]
        if key == TAX_SETTINGS:
            return self.tax_settings.to_dict()
        raise KeyError(key)

    def to_dict(self) -> dict:
        return {key: self.section(key) for key in CONFIG_KEYS}


# ═══════════════════════════════════════════════════════════════════════════════
# BUILT-IN DEFAULTS (2025)
# ═══════════════════════════════════════════════════════════════════════════════

_STATE_ROWS = [
    ("baden-wuerttemberg", "Baden-Württemberg", 8),
    ("bayern", "Bayern", 8),
    ("berlin", "Berlin", 9),
    ("brandenburg", "Brandenburg", 9),
    ("bremen", "Bremen", 9),
    ("hamburg", "Hamburg", 9),
    ("hessen", "Hessen", 9),
    ("mecklenburg-vorpommern", "Mecklenburg-Vorpommern", 9),
    ("niedersachsen", "Niedersachsen", 9),
    ("nordrhein-westfalen", "Nordrhein-Westfalen", 9),
    ("rheinland-pfalz", "Rheinland-Pfalz", 9),
    ("saarland", "Saarland", 9),
    ("sachsen", "Sachsen", 9),
    ("sachsen-anhalt", "Sachsen-Anhalt", 9),
    ("schleswig-holstein", "Schleswig-Holstein", 9),
    ("thueringen", "Thüringen", 9),
]

_TAX_CLASS_ROWS = [
    ("1", "Grundfreibetrag 11.604 € / Jahr"),
    ("2", "Zusätzliche Entlastung 1.308 € / Jahr"),
    ("3", "Doppelter Grundfreibetrag für Verheiratete"),
    ("4", "Einzelveranlagung für Verheiratete"),
    ("5", "Niedrigeres Einkommen in der Ehe"),
    ("6", "Zweitjob oder Nebentätigkeit"),
]

DEFAULT_RATE_CONFIG = RateConfiguration(
    states=tuple(StateRate(key, label, rate) for key, label, rate in _STATE_ROWS),
    tax_classes=tuple(
        TaxClass(key, f"Steuerklasse {key}", description) for key, description in _TAX_CLASS_ROWS
    ),
    social_insurance=SocialInsuranceRates(
        pension=SocialInsuranceRate("Rentenversicherung", 9.3),
        health=SocialInsuranceRate("Krankenversicherung", 8.55),
        care=SocialInsuranceRate("Pflegeversicherung", 1.875),
        unemployment=SocialInsuranceRate("Arbeitslosenversicherung", 1.3),
        solidarity=SocialInsuranceRate("Solidaritätszuschlag", 0),
    ),
    info_sections=(
        InfoSection(
            "allowances",
            "Vergünstigungen (Steuerklassen)",
            (
                "Klasse 1: Grundfreibetrag 11.604 € / Jahr",
                "Klasse 2: Zusätzliche Entlastung 1.308 € / Jahr",
                "Klasse 3: Doppelter Grundfreibetrag für Verheiratete",
                "Klasse 4: Einzelveranlagung für Verheiratete",
            ),
        ),
        InfoSection(
            "rates",
            "Sozialversicherungsraten 2025",
            (
                "Rentenversicherung: 18,6 % gesamt (9,3 % Arbeitnehmer)",
                "Krankenversicherung: 8,55 % Arbeitnehmeranteil",
                "Pflegeversicherung: 1,875 % (kinderlos)",
                "Arbeitslosenversicherung: 2,6 % gesamt (1,3 % Arbeitnehmer)",
                "Solidaritätszuschlag: 0 % (aufgehoben)",
            ),
        ),
    ),
    tax_settings=TaxSettings(
        basic_allowance=11604,
        single_parent_allowance=1308,
        married_allowance_multiplier=2,
    ),
)


def extract_config_entries(entries: dict) -> dict:
    """Keep only the known section keys of a raw entry mapping."""
    return {key: entries[key] for key in CONFIG_KEYS if key in entries}
