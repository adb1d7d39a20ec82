"""Ledger transaction model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fd_engine.models.enums import TransactionType


@dataclass(frozen=True)
class Transaction:
    """Append-only ledger posting.

    ``amount`` is signed: deposits and accruals are positive, payouts and
    penalties negative.
    """

    account_number: str
    transaction_reference: str
    transaction_type: TransactionType
    amount: Decimal
    transaction_date: datetime
    description: str | None = None

    @property
    def display_description(self) -> str:
        return self.description if self.description else self.transaction_type.display_name
