"""
Parameter Validation Module
===========================
Declarative validators for Flask request parameters and JSON bodies.

Usage:
    from validators import validate_params, CALCULATION_FIELDS

    # In endpoint:
    params, error = validate_params(request.get_json(), CALCULATION_FIELDS)
    if error:
        return error
    state = params["bundesland"]
"""

from dataclasses import dataclass
from typing import Optional, Union, Tuple, Any
from flask import jsonify

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def _to_bool(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return raw.strip().lower() in _TRUE_STRINGS
    raise ValueError(f"not a boolean: {raw!r}")


@dataclass
class ParamValidator:
    """
    Declarative validator for a single request parameter.

    Attributes:
        name: Parameter name in request.args or the JSON body
        param_type: Expected type (str, int, float, bool)
        default: Default value if not provided (None means optional)
        min_val: Minimum value (for int/float)
        max_val: Maximum value (for int/float)
        error_msg: Custom error message format
    """
    name: str
    param_type: type
    default: Any = None
    min_val: Optional[Union[int, float]] = None
    max_val: Optional[Union[int, float]] = None
    error_msg: Optional[str] = None

    def validate(self, args: dict) -> Tuple[Optional[Any], Optional[Tuple]]:
        """
        Validate a parameter from request args or a decoded JSON body.

        Args:
            args: Mapping of parameter name to raw value

        Returns:
            (value, None) on success
            (None, (jsonify_response, 400)) on error
        """
        raw = args.get(self.name)

        # Handle missing/empty values
        if raw is None or raw == "":
            if self.default is not None:
                return self.default, None
            # Parameter is optional if default is None
            return None, None

        # Type conversion
        try:
            if self.param_type == bool:
                value = _to_bool(raw)
            elif isinstance(raw, bool):
                raise TypeError(f"unexpected boolean for {self.name}")
            elif self.param_type == str:
                value = str(raw)
            elif self.param_type == int:
                value = int(raw)
            elif self.param_type == float:
                value = float(raw)
            else:
                value = raw
        except (ValueError, TypeError):
            msg = self.error_msg or f"'{self.name}' must be a valid {self.param_type.__name__}"
            return None, (jsonify({"error": msg}), 400)

        # Validate numeric range
        if self.min_val is not None and value < self.min_val:
            msg = self.error_msg or f"{self.name} must be >= {self.min_val}"
            return None, (jsonify({"error": msg}), 400)

        if self.max_val is not None and value > self.max_val:
            msg = self.error_msg or f"{self.name} must be <= {self.max_val}"
            return None, (jsonify({"error": msg}), 400)

        return value, None


def validate_params(
    args: dict,
    validators: list[ParamValidator]
) -> Tuple[dict, Optional[Tuple]]:
    """
    Validate multiple parameters at once.

    Args:
        args: Request args dict or decoded JSON body
        validators: List of ParamValidator instances

    Returns:
        (params_dict, None) on success - dict maps param name to validated value
        ({}, error_tuple) on first validation error
    """
    result = {}
    for v in validators:
        value, error = v.validate(args)
        if error:
            return {}, error
        result[v.name] = value
    return result, None


# ═══════════════════════════════════════════════════════════════════════════════
# CALCULATION REQUEST FIELDS
# Field names match the calculator form (bruttoGehalt is validated by the
# calculator itself so that non-numeric input yields the same error everywhere)
# ═══════════════════════════════════════════════════════════════════════════════

STATE = ParamValidator(name="bundesland", param_type=str, default="")

TAX_CLASS = ParamValidator(name="steuerklasse", param_type=str, default="1")

CHURCH_TAX = ParamValidator(name="kirchensteuerpflicht", param_type=bool, default=False)

CHILD_ALLOWANCE = ParamValidator(
    name="kinderfreibetrag",
    param_type=int,
    default=0,
    min_val=0,
    error_msg="kinderfreibetrag must be a non-negative integer",
)

HEALTH_INSURANCE = ParamValidator(name="krankenversicherung", param_type=bool, default=False)
PENSION_INSURANCE = ParamValidator(name="rentenversicherung", param_type=bool, default=False)
UNEMPLOYMENT_INSURANCE = ParamValidator(name="arbeitslosenversicherung", param_type=bool, default=False)
CARE_INSURANCE = ParamValidator(name="pflegeversicherung", param_type=bool, default=False)

WEEKLY_HOURS = ParamValidator(
    name="wochenstunden",
    param_type=float,
    default=40,
    min_val=1,
    max_val=168,
    error_msg="wochenstunden must be between 1 and 168",
)

CALCULATION_FIELDS = [
    STATE,
    TAX_CLASS,
    CHURCH_TAX,
    CHILD_ALLOWANCE,
    HEALTH_INSURANCE,
    PENSION_INSURANCE,
    UNEMPLOYMENT_INSURANCE,
    CARE_INSURANCE,
    WEEKLY_HOURS,
]
