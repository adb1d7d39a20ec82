"""Calculation service result model."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class CalculationResult:
    """Quote returned by the FD calculation service.

    ``principal_amount`` is optional; when absent the principal is derived
    from ``maturity_value`` at ``effective_rate``.
    """

    maturity_value: Decimal
    maturity_date: date
    product_code: str
    effective_rate: Decimal | None = None
    apy: Decimal | None = None
    payout_freq: str | None = None
    payout_amount: Decimal | None = None
    calc_id: int | None = None
    result_id: int | None = None
    category1_id: str | None = None
    category2_id: str | None = None
    principal_amount: Decimal | None = None
    tenure_value: int | None = None
    tenure_unit: str | None = None

    @property
    def rate(self) -> Decimal:
        """Annual rate used for the deposit: the effective rate, else the APY."""
        if self.effective_rate is not None:
            return self.effective_rate
        if self.apy is not None:
            return self.apy
        return Decimal("0")
