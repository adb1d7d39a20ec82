"""Premature withdrawal inquiry result."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class InquiryResult:
    """Figures for closing an account before maturity on ``inquiry_date``."""

    account_number: str
    original_principal: Decimal
    interest_accrued_to_date: Decimal
    penalty_amount: Decimal
    final_payout_amount: Decimal
    inquiry_date: date
    days_active: int = 0
    completion_percentage: Decimal = Decimal("0")
    penalty_rate: Decimal = Decimal("0")
    original_interest_accrued: Decimal = Decimal("0")
