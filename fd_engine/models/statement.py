"""Statement records."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from fd_engine.models.transaction import Transaction


@dataclass(frozen=True)
class CurrentBalances:
    """Live balance buckets folded into the statement summary."""

    as_of: datetime
    principal: Decimal = Decimal("0")
    interest: Decimal = Decimal("0")
    penalty: Decimal = Decimal("0")

    @property
    def closing_balance(self) -> Decimal:
        return self.principal + self.interest - self.penalty


@dataclass(frozen=True)
class StatementLine:
    """One transaction as printed on a statement."""

    date: date
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    reference: str


@dataclass
class StatementData:
    """Aggregated figures for one account over a statement period.

    ``transactions`` is newest-first; ``lines`` is chronological so that
    each running balance follows from the previous line.
    """

    account_number: str
    period_start: date
    period_end: date
    opening_balance: Decimal
    closing_balance: Decimal
    current_balances: CurrentBalances
    transactions: list[Transaction] = field(default_factory=list)
    lines: list[StatementLine] = field(default_factory=list)


@dataclass
class BatchResult:
    """Outcome of a batch run over many accounts."""

    success_count: int = 0
    failure_count: int = 0
    failed_accounts: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count
