"""Tests for money and date arithmetic."""

from datetime import date
from decimal import Decimal

import pytest

from fd_engine.exceptions import ValidationError
from fd_engine.money import (
    accrue_simple_interest,
    add_months,
    calculate_maturity_amount,
    calculate_principal_from_maturity,
    days_between,
    months_between,
    quantize2,
    quantize4,
    to_decimal,
)


class TestRounding:
    """Tests for half-up rounding helpers."""

    def test_quantize2_half_up(self) -> None:
        assert quantize2(Decimal("2.345")) == Decimal("2.35")
        assert quantize2(Decimal("2.344")) == Decimal("2.34")
        assert quantize2(Decimal("-2.345")) == Decimal("-2.35")

    def test_quantize4_half_up(self) -> None:
        assert quantize4(Decimal("1.00005")) == Decimal("1.0001")

    def test_to_decimal_from_float_has_no_artifacts(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal("7.50") == Decimal("7.50")
        assert to_decimal(3) == Decimal(3)


class TestMaturityAmount:
    """Tests for the simple-interest maturity formula."""

    def test_twelve_months_at_seven_and_a_half(self) -> None:
        assert calculate_maturity_amount(Decimal("100000.00"), Decimal("7.50"), 12) == Decimal("107500.00")

    def test_six_months(self) -> None:
        assert calculate_maturity_amount(Decimal("50000"), Decimal("6.00"), 6) == Decimal("51500.00")

    def test_zero_rate(self) -> None:
        assert calculate_maturity_amount(Decimal("1000"), Decimal("0"), 24) == Decimal("1000.00")

    def test_zero_term(self) -> None:
        assert calculate_maturity_amount(Decimal("1000"), Decimal("7.50"), 0) == Decimal("1000.00")

    def test_non_positive_principal_rejected(self) -> None:
        with pytest.raises(ValidationError):
            calculate_maturity_amount(Decimal("0"), Decimal("7.50"), 12)

    def test_negative_rate_rejected(self) -> None:
        with pytest.raises(ValidationError):
            calculate_maturity_amount(Decimal("1000"), Decimal("-1"), 12)

    def test_negative_term_rejected(self) -> None:
        with pytest.raises(ValidationError):
            calculate_maturity_amount(Decimal("1000"), Decimal("7.50"), -1)


class TestPrincipalFromMaturity:
    """Tests for inverting the maturity formula."""

    def test_inverts_scenario(self) -> None:
        assert calculate_principal_from_maturity(Decimal("107500.00"), Decimal("7.50"), 12) == Decimal(
            "100000.0000"
        )

    def test_zero_rate_is_identity(self) -> None:
        assert calculate_principal_from_maturity(Decimal("1234.56"), Decimal("0"), 36) == Decimal("1234.56")

    @pytest.mark.parametrize(
        "principal,rate,term",
        [
            (Decimal("100000.00"), Decimal("7.50"), 12),
            (Decimal("12345.67"), Decimal("6.25"), 7),
            (Decimal("999999.99"), Decimal("8.10"), 60),
            (Decimal("10000.00"), Decimal("5.55"), 1),
        ],
    )
    def test_round_trip_within_rounding(self, principal: Decimal, rate: Decimal, term: int) -> None:
        maturity = calculate_maturity_amount(principal, rate, term)

        recovered = calculate_principal_from_maturity(maturity, rate, term)

        assert abs(recovered - principal) <= Decimal("0.01")

    def test_non_positive_maturity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            calculate_principal_from_maturity(Decimal("0"), Decimal("7.50"), 12)


class TestSimpleInterestAccrual:
    """Tests for daily simple interest."""

    def test_full_year(self) -> None:
        assert accrue_simple_interest(Decimal("100000"), Decimal("7.50"), 365) == Decimal("7500.00")

    def test_partial_term(self) -> None:
        assert accrue_simple_interest(Decimal("100000"), Decimal("7.50"), 219) == Decimal("4500.00")

    def test_zero_days(self) -> None:
        assert accrue_simple_interest(Decimal("100000"), Decimal("7.50"), 0) == Decimal("0.00")


class TestDateArithmetic:
    """Tests for day and month differences."""

    def test_days_between_is_signed(self) -> None:
        assert days_between(date(2024, 1, 1), date(2024, 3, 1)) == 60
        assert days_between(date(2024, 3, 1), date(2024, 1, 1)) == -60

    def test_months_between_whole_months(self) -> None:
        assert months_between(date(2024, 1, 15), date(2025, 1, 15)) == 12

    def test_months_between_drops_partial_month(self) -> None:
        assert months_between(date(2024, 1, 31), date(2024, 2, 29)) == 0
        assert months_between(date(2024, 1, 15), date(2024, 3, 14)) == 1

    def test_months_between_negative(self) -> None:
        assert months_between(date(2024, 3, 15), date(2024, 1, 20)) == -1

    def test_add_months_clamps_to_month_end(self) -> None:
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_add_months_crosses_year(self) -> None:
        assert add_months(date(2024, 11, 10), 14) == date(2026, 1, 10)
        assert add_months(date(2024, 1, 1), 12) == date(2025, 1, 1)
