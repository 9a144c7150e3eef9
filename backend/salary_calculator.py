"""
Salary Calculator
=================
Gross-to-net salary calculation for German employees (2025 schedule).

Main entry point:
    calculate(calculation_input, rate_config) -> CalculationResult

Pure and deterministic: the caller passes the resolved RateConfiguration,
nothing is read from storage here.

Money is handled as Decimal. Every emitted figure is rounded half-up to
cents; derived figures (church tax, solidarity surcharge, totals, net salary,
yearly values) are computed from the already rounded monthly components, so
net + total deductions == gross and yearly == monthly * 12 hold exactly.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from config import DEFAULT_WEEKLY_HOURS, MONTHS_PER_YEAR, WEEKS_PER_YEAR
from rate_config import RateConfiguration, TaxClass, TaxSettings

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
NO_AMOUNT = Decimal("0.00")

# Upper bounds keep every figure within Decimal precision when rounded to cents
MAX_GROSS_SALARY = Decimal("1000000000")
MAX_WEEKLY_HOURS = Decimal("168")


class CalculationInputError(ValueError):
    """Raised when calculation input cannot produce a result."""


# ─── Income tax zones (§ 32a EStG, 2025) ─────────────────────────────────────

ZONE_1_LIMIT = Decimal("11604")
ZONE_2_LIMIT = Decimal("17005")
ZONE_3_LIMIT = Decimal("66760")
ZONE_4_LIMIT = Decimal("277825")


def annual_income_tax(taxable_income: Decimal) -> Decimal:
    """
    Apply the progressive 2025 formula to annual taxable income.

    Zones:
        <= 11604          0
        <= 17005          (995.21 * y + 1400) * y,           y = (x - 11604) / 10000
        <= 66760          (208.85 * y + 2397) * y + 938.24,  y = (x - 17005) / 10000
        <= 277825         0.42 * x - 9972.98
        above             0.45 * x - 18295.73
    """
    x = taxable_income
    if x <= ZONE_1_LIMIT:
        return ZERO
    if x <= ZONE_2_LIMIT:
        y = (x - ZONE_1_LIMIT) / 10000
        return (Decimal("995.21") * y + 1400) * y
    if x <= ZONE_3_LIMIT:
        y = (x - ZONE_2_LIMIT) / 10000
        return (Decimal("208.85") * y + 2397) * y + Decimal("938.24")
    if x <= ZONE_4_LIMIT:
        return Decimal("0.42") * x - Decimal("9972.98")
    return Decimal("0.45") * x - Decimal("18295.73")


# ═══════════════════════════════════════════════════════════════════════════════
# INPUT / RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CalculationInput:
    """
    One salary calculation request.

    Attributes:
        gross_salary: Gross monthly salary; validated by calculate()
        state: State key (e.g. "bayern")
        tax_class: Tax class key ("1".."6")
        church_tax_liable: Whether church tax applies
        child_allowance_count: Kinderfreibetrag count (accepted, not used by the formula)
        health_insurance / pension_insurance / care_insurance / unemployment_insurance:
            Which social-insurance components apply
        weekly_hours: Working hours per week for the hourly figures
    """
    gross_salary: Number
    state: str
    tax_class: str
    church_tax_liable: bool = False
    child_allowance_count: int = 0
    health_insurance: bool = False
    pension_insurance: bool = False
    care_insurance: bool = False
    unemployment_insurance: bool = False
    weekly_hours: Number = DEFAULT_WEEKLY_HOURS


def _money(value: Decimal) -> float:
    return float(value)


@dataclass(frozen=True)
class SocialInsuranceBreakdown:
    pension: Decimal
    health: Decimal
    care: Decimal
    unemployment: Decimal
    total: Decimal

    def scaled(self, factor: int) -> "SocialInsuranceBreakdown":
        return SocialInsuranceBreakdown(
            pension=self.pension * factor,
            health=self.health * factor,
            care=self.care * factor,
            unemployment=self.unemployment * factor,
            total=self.total * factor,
        )

    def to_dict(self) -> dict:
        return {
            "pension": _money(self.pension),
            "health": _money(self.health),
            "care": _money(self.care),
            "unemployment": _money(self.unemployment),
            "total": _money(self.total),
        }


@dataclass(frozen=True)
class HourlyFigures:
    gross: Decimal
    net: Decimal
    weekly_hours: Decimal

    def to_dict(self) -> dict:
        hours = self.weekly_hours
        return {
            "gross": _money(self.gross),
            "net": _money(self.net),
            "weeklyHours": int(hours) if hours == hours.to_integral_value() else float(hours),
        }


@dataclass(frozen=True)
class YearlyFigures:
    gross_salary: Decimal
    income_tax: Decimal
    church_tax: Decimal
    solidarity_tax: Decimal
    social_insurance: SocialInsuranceBreakdown
    net_salary: Decimal
    total_deductions: Decimal

    def to_dict(self) -> dict:
        return {
            "grossSalary": _money(self.gross_salary),
            "incomeTax": _money(self.income_tax),
            "churchTax": _money(self.church_tax),
            "solidarityTax": _money(self.solidarity_tax),
            "socialInsurance": self.social_insurance.to_dict(),
            "netSalary": _money(self.net_salary),
            "totalDeductions": _money(self.total_deductions),
        }


@dataclass(frozen=True)
class CalculationResult:
    """Monthly breakdown plus hourly and yearly projections."""
    gross_salary: Decimal
    income_tax: Decimal
    church_tax: Decimal
    solidarity_tax: Decimal
    social_insurance: SocialInsuranceBreakdown
    net_salary: Decimal
    total_deductions: Decimal
    hourly: HourlyFigures
    yearly: YearlyFigures

    def to_dict(self) -> dict:
        return {
            "grossSalary": _money(self.gross_salary),
            "incomeTax": _money(self.income_tax),
            "churchTax": _money(self.church_tax),
            "solidarityTax": _money(self.solidarity_tax),
            "socialInsurance": self.social_insurance.to_dict(),
            "netSalary": _money(self.net_salary),
            "totalDeductions": _money(self.total_deductions),
            "hourly": self.hourly.to_dict(),
            "yearly": self.yearly.to_dict(),
        }


# ─── Helper Functions ─────────────────────────────────────────────────────────


def _to_decimal(value: Number, field: str) -> Decimal:
    """Convert user input to a finite Decimal or raise CalculationInputError."""
    if isinstance(value, bool) or value is None:
        raise CalculationInputError(f"Invalid {field}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise CalculationInputError(f"Invalid {field}") from None
    if not result.is_finite():
        raise CalculationInputError(f"Invalid {field}")
    return result


def _rate(percent) -> Decimal:
    """Configured percentage -> Decimal fraction (8 -> 0.08)."""
    return Decimal(str(percent)) / HUNDRED


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_gross_salary(value: Number) -> Decimal:
    """
    Validate gross monthly salary and round it to cents.

    Accepts finite amounts in (0, MAX_GROSS_SALARY]. Rounding happens before
    the positivity check, so sub-cent amounts (e.g. "0.004") count as zero
    and are rejected.
    """
    gross = _to_decimal(value, "gross salary")
    if gross <= 0 or gross > MAX_GROSS_SALARY:
        raise CalculationInputError("Invalid gross salary")
    gross = round_cents(gross)
    if gross <= 0:
        raise CalculationInputError("Invalid gross salary")
    return gross


def tax_class_allowance(
    tax_class_key: str,
    settings: TaxSettings,
    tax_class: Optional[TaxClass] = None,
) -> Decimal:
    """
    Annual allowance subtracted from salary before the zone formula.

    Classes 1, 4, 5 get the basic allowance, class 2 adds the single-parent
    allowance, class 3 multiplies the basic allowance. Class 6 and unknown
    keys get nothing. A configured per-class allowance_amount is added on top.
    """
    basic = Decimal(str(settings.basic_allowance))
    if tax_class_key in ("1", "4", "5"):
        allowance = basic
    elif tax_class_key == "2":
        allowance = basic + Decimal(str(settings.single_parent_allowance))
    elif tax_class_key == "3":
        allowance = basic * Decimal(str(settings.married_allowance_multiplier))
    else:
        allowance = ZERO

    if tax_class is not None:
        allowance += Decimal(str(tax_class.allowance_amount))
    return allowance


def monthly_income_tax(
    gross_salary: Decimal,
    tax_class_key: str,
    rate_config: RateConfiguration,
) -> Decimal:
    """Monthly income tax (Lohnsteuer), rounded to cents."""
    tax_class = rate_config.find_tax_class(tax_class_key)
    annual_salary = gross_salary * MONTHS_PER_YEAR
    taxable = annual_salary - tax_class_allowance(tax_class_key, rate_config.tax_settings, tax_class)

    if taxable <= 0:
        return NO_AMOUNT

    monthly_tax = annual_income_tax(taxable) / MONTHS_PER_YEAR
    if tax_class is not None:
        monthly_tax *= 1 - _rate(tax_class.extra_deduction_percent)
    return round_cents(max(monthly_tax, ZERO))


def social_insurance_contributions(
    gross_salary: Decimal,
    calculation_input: CalculationInput,
    rate_config: RateConfiguration,
) -> SocialInsuranceBreakdown:
    """Employee shares for the enabled insurance components."""
    rates = rate_config.social_insurance

    def contribution(enabled: bool, insurance_type: str) -> Decimal:
        if not enabled:
            return NO_AMOUNT
        return round_cents(gross_salary * _rate(rates.rate(insurance_type).employee_rate))

    pension = contribution(calculation_input.pension_insurance, "pension")
    health = contribution(calculation_input.health_insurance, "health")
    care = contribution(calculation_input.care_insurance, "care")
    unemployment = contribution(calculation_input.unemployment_insurance, "unemployment")
    return SocialInsuranceBreakdown(
        pension=pension,
        health=health,
        care=care,
        unemployment=unemployment,
        total=pension + health + care + unemployment,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════════


def calculate(calculation_input: CalculationInput, rate_config: RateConfiguration) -> CalculationResult:
    """
    Calculate the net salary breakdown.

    Args:
        calculation_input: Gross salary, state, tax class and insurance elections
        rate_config: Resolved rate tables

    Returns:
        CalculationResult with monthly, hourly and yearly figures.

    Raises:
        CalculationInputError: if gross salary is not a positive amount up to
            MAX_GROSS_SALARY, or weekly hours are outside 1..168
    """
    gross = parse_gross_salary(calculation_input.gross_salary)
    weekly_hours = _to_decimal(calculation_input.weekly_hours, "weekly hours")
    if not 1 <= weekly_hours <= MAX_WEEKLY_HOURS:
        raise CalculationInputError("Invalid weekly hours")

    income_tax = monthly_income_tax(gross, calculation_input.tax_class, rate_config)

    state = rate_config.find_state(calculation_input.state)
    church_rate = _rate(state.church_tax_rate) if state is not None else ZERO
    church_tax = round_cents(income_tax * church_rate) if calculation_input.church_tax_liable else NO_AMOUNT

    solidarity_rate = _rate(rate_config.social_insurance.solidarity.employee_rate)
    solidarity_tax = round_cents(income_tax * solidarity_rate)

    social = social_insurance_contributions(gross, calculation_input, rate_config)

    total_deductions = income_tax + church_tax + solidarity_tax + social.total
    net_salary = gross - total_deductions

    monthly_hours = weekly_hours * WEEKS_PER_YEAR / MONTHS_PER_YEAR
    hourly = HourlyFigures(
        gross=round_cents(gross / monthly_hours),
        net=round_cents(net_salary / monthly_hours),
        weekly_hours=weekly_hours,
    )

    yearly = YearlyFigures(
        gross_salary=gross * MONTHS_PER_YEAR,
        income_tax=income_tax * MONTHS_PER_YEAR,
        church_tax=church_tax * MONTHS_PER_YEAR,
        solidarity_tax=solidarity_tax * MONTHS_PER_YEAR,
        social_insurance=social.scaled(MONTHS_PER_YEAR),
        net_salary=net_salary * MONTHS_PER_YEAR,
        total_deductions=total_deductions * MONTHS_PER_YEAR,
    )

    return CalculationResult(
        gross_salary=gross,
        income_tax=income_tax,
        church_tax=church_tax,
        solidarity_tax=solidarity_tax,
        social_insurance=social,
        net_salary=net_salary,
        total_deductions=total_deductions,
        hourly=hourly,
        yearly=yearly,
    )
