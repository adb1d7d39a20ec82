"""Balance bucket model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class BalanceEntry:
    """Named running total for an account (FD_PRINCIPAL, FD_INTEREST, PENALTY, ...)."""

    account_number: str
    balance_type: str
    balance_amount: Decimal
    created_at: datetime
    is_active: bool = True
    updated_at: datetime | None = None
