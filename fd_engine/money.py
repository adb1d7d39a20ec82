"""Money and date arithmetic shared by the engines.

All rounding is ``ROUND_HALF_UP``. Rates are annual percentages
(``Decimal("7.50")`` means 7.5% p.a.). Intermediate rate and term factors
are carried with 10 decimal places.
"""

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from fd_engine.exceptions import ValidationError

HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")
DAYS_PER_YEAR = Decimal("365")

CENTS = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")
TEN_PLACES = Decimal("1E-10")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric value to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize2(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def quantize4(value: Decimal) -> Decimal:
    """Round to 4 decimal places, half-up."""
    return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def _scale10(value: Decimal) -> Decimal:
    return value.quantize(TEN_PLACES, rounding=ROUND_HALF_UP)


def _simple_interest_factor(rate: Decimal, term_in_months: int) -> Decimal:
    """Return ``r * t`` with ``r = rate/100`` and ``t = months/12``."""
    rate_as_decimal = _scale10(rate / HUNDRED)
    term_in_years = _scale10(Decimal(term_in_months) / MONTHS_PER_YEAR)
    return rate_as_decimal * term_in_years


def _validate_term(rate: Decimal, term_in_months: int) -> None:
    if rate < 0:
        raise ValidationError(f"Interest rate cannot be negative: {rate}")
    if term_in_months < 0:
        raise ValidationError(f"Term cannot be negative: {term_in_months}")


def calculate_maturity_amount(
    principal: Decimal,
    rate: Decimal,
    term_in_months: int,
) -> Decimal:
    """Project a simple-interest maturity amount.

    ``A = P * (1 + r*t)``, rounded to 2 decimals.

    Parameters
    ----------
    principal : Decimal
        Deposited principal.
    rate : Decimal
        Annual rate in percent.
    term_in_months : int
        Term length in months.

    Returns
    -------
    Decimal
        Maturity amount.
    """
    principal = to_decimal(principal)
    rate = to_decimal(rate)
    _validate_term(rate, term_in_months)
    if principal <= 0:
        raise ValidationError(f"Principal must be positive: {principal}")

    interest = principal * _simple_interest_factor(rate, term_in_months)
    return quantize2(principal + interest)


def calculate_principal_from_maturity(
    maturity_amount: Decimal,
    rate: Decimal,
    term_in_months: int,
) -> Decimal:
    """Invert the simple-interest maturity formula.

    ``P = M / (1 + r*t)``, rounded to 4 decimals. A zero rate returns the
    maturity amount unchanged.
    """
    maturity_amount = to_decimal(maturity_amount)
    rate = to_decimal(rate)
    _validate_term(rate, term_in_months)
    if maturity_amount <= 0:
        raise ValidationError(f"Maturity amount must be positive: {maturity_amount}")

    if rate == 0:
        return maturity_amount

    divisor = Decimal(1) + _simple_interest_factor(rate, term_in_months)
    return quantize4(maturity_amount / divisor)


def accrue_simple_interest(principal: Decimal, annual_rate: Decimal, days: int) -> Decimal:
    """Interest earned over ``days`` at a simple daily rate of ``annual_rate/100/365``."""
    daily_rate = _scale10(_scale10(to_decimal(annual_rate) / HUNDRED) / DAYS_PER_YEAR)
    return quantize2(to_decimal(principal) * daily_rate * Decimal(days))


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``.

    A trailing partial month is not counted, so 2024-01-31 to 2024-02-29
    is 0 months and 2024-01-15 to 2025-01-15 is 12.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping to the last day of the target month."""
    index = start.year * 12 + (start.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(start.day, calendar.monthrange(year, month)[1]))
