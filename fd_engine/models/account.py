"""Fixed deposit account aggregate."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from fd_engine.exceptions import InvalidStateError, ValidationError
from fd_engine.models.enums import (
    STATUS_TRANSITIONS,
    AccountStatus,
    MaturityInstruction,
    RoleType,
    TransactionType,
)
from fd_engine.models.transaction import Transaction

MAX_OWNERSHIP = Decimal("100")


@dataclass
class AccountHolder:
    """Customer attached to an account in a given role.

    ``ownership_percentage`` may be ``None`` (e.g. nominees) but when set it
    must lie in [0, 100].
    """

    customer_id: str
    role_type: RoleType
    ownership_percentage: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.customer_id:
            raise ValidationError("Account holder requires a customer id")
        pct = self.ownership_percentage
        if pct is not None and not (Decimal(0) <= pct <= MAX_OWNERSHIP):
            raise ValidationError(f"Ownership percentage must be within [0, 100], got {pct}")


@dataclass
class Account:
    """Fixed deposit account (aggregate root).

    Holders and transactions are owned by the account and only grow through
    :meth:`add_holder` and :meth:`post_transaction`. The read-only
    :attr:`holders` and :attr:`transactions` views return tuples.
    """

    account_number: str
    account_name: str
    product_code: str
    status: AccountStatus
    term_in_months: int
    interest_rate: Decimal  # annual %, e.g. 7.50
    principal_amount: Decimal
    maturity_amount: Decimal
    effective_date: date
    maturity_date: date
    created_at: datetime
    maturity_instruction: MaturityInstruction = MaturityInstruction.PAYOUT_TO_LINKED_ACCOUNT
    payout_account_number: str | None = None

    # Calculation service metadata
    calc_id: int | None = None
    result_id: int | None = None
    apy: Decimal | None = None
    effective_rate: Decimal | None = None
    payout_freq: str | None = None
    payout_amount: Decimal | None = None
    category1_id: str | None = None
    category2_id: str | None = None
    tenure_value: int | None = None
    tenure_unit: str | None = None

    # Product service metadata
    currency: str | None = None
    interest_type: str | None = None
    compounding_frequency: str | None = None

    account_id: int = 0
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    version: int = 0

    _holders: list[AccountHolder] = field(default_factory=list, repr=False)
    _transactions: list[Transaction] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.maturity_date < self.effective_date:
            raise ValidationError(
                f"Maturity date {self.maturity_date} precedes effective date {self.effective_date}"
            )
        if self.principal_amount <= 0:
            raise ValidationError(f"Principal must be positive, got {self.principal_amount}")

    @property
    def holders(self) -> tuple[AccountHolder, ...]:
        return tuple(self._holders)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def customer_ids(self) -> list[str]:
        """Customer ids of every holder, in holder order, without duplicates."""
        return list(dict.fromkeys(h.customer_id for h in self._holders))

    @property
    def primary_customer_id(self) -> str | None:
        for holder in self._holders:
            if holder.role_type == RoleType.OWNER:
                return holder.customer_id
        return self._holders[0].customer_id if self._holders else None

    @property
    def total_term_days(self) -> int:
        return (self.maturity_date - self.effective_date).days

    def add_holder(self, holder: AccountHolder) -> None:
        """Attach a holder, enforcing (customer_id, role_type) uniqueness."""
        for existing in self._holders:
            if existing.customer_id == holder.customer_id and existing.role_type == holder.role_type:
                raise ValidationError(
                    f"Customer {holder.customer_id} already holds role {holder.role_type.value} "
                    f"on account {self.account_number}"
                )
        self._holders.append(holder)

    def post_transaction(
        self,
        transaction_type: TransactionType,
        amount: Decimal,
        transaction_date: datetime,
        reference: str,
        description: str | None = None,
    ) -> Transaction:
        """Append a ledger entry.

        ``amount`` is the non-negative magnitude; the stored amount carries
        the transaction type's sign.
        """
        if amount < 0:
            raise ValidationError(f"Posting amount must be a non-negative magnitude, got {amount}")
        if any(t.transaction_reference == reference for t in self._transactions):
            raise ValidationError(f"Duplicate transaction reference: {reference}")

        transaction = Transaction(
            account_number=self.account_number,
            transaction_reference=reference,
            transaction_type=transaction_type,
            amount=amount * transaction_type.sign,
            transaction_date=transaction_date,
            description=description,
        )
        self._transactions.append(transaction)
        return transaction

    def restore_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Reattach persisted postings, already signed, to a freshly loaded account."""
        if self._transactions:
            raise InvalidStateError(f"Account {self.account_number} already has postings")
        for transaction in transactions:
            if transaction.account_number != self.account_number:
                raise ValidationError(
                    f"Transaction {transaction.transaction_reference} belongs to account "
                    f"{transaction.account_number}, not {self.account_number}"
                )
            self._transactions.append(transaction)

    def transition_to(self, status: AccountStatus, at: datetime) -> None:
        """Move to ``status`` if the state machine allows it."""
        if status not in STATUS_TRANSITIONS[self.status]:
            raise InvalidStateError(
                f"Account {self.account_number} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status
        self.updated_at = at
        if status.is_terminal:
            self.closed_at = at

    def ledger_balance(self) -> Decimal:
        """Sum of all signed transaction amounts."""
        return sum((t.amount for t in self._transactions), Decimal(0))
