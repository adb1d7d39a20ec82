"""Enumeration types for fixed deposit entities."""

from enum import Enum

from fd_engine.exceptions import ValidationError


class AccountStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    PREMATURELY_CLOSED = "PREMATURELY_CLOSED"
    MATURED = "MATURED"
    CLOSED = "CLOSED"

    @property
    def is_terminal(self) -> bool:
        return self in CLOSED_STATUSES


CLOSED_STATUSES = frozenset(
    {AccountStatus.PREMATURELY_CLOSED, AccountStatus.MATURED, AccountStatus.CLOSED}
)

# Allowed forward transitions; terminal states have none.
STATUS_TRANSITIONS: dict[AccountStatus, frozenset[AccountStatus]] = {
    AccountStatus.PENDING: frozenset({AccountStatus.ACTIVE, AccountStatus.CLOSED}),
    AccountStatus.ACTIVE: CLOSED_STATUSES,
    AccountStatus.PREMATURELY_CLOSED: frozenset(),
    AccountStatus.MATURED: frozenset(),
    AccountStatus.CLOSED: frozenset(),
}


class TransactionType(str, Enum):
    PRINCIPAL_DEPOSIT = "PRINCIPAL_DEPOSIT"
    INTEREST_ACCRUAL = "INTEREST_ACCRUAL"
    INTEREST_PAYOUT = "INTEREST_PAYOUT"
    INTEREST_CAPITALIZATION = "INTEREST_CAPITALIZATION"
    PREMATURE_WITHDRAWAL = "PREMATURE_WITHDRAWAL"
    PENALTY_DEBIT = "PENALTY_DEBIT"
    MATURITY_PAYOUT = "MATURITY_PAYOUT"
    RENEWAL_DEPOSIT = "RENEWAL_DEPOSIT"

    @property
    def sign(self) -> int:
        """+1 for money entering the deposit, -1 for money leaving it."""
        return -1 if self in _DEBIT_TYPES else 1

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


_DEBIT_TYPES = frozenset(
    {
        TransactionType.INTEREST_PAYOUT,
        TransactionType.PREMATURE_WITHDRAWAL,
        TransactionType.PENALTY_DEBIT,
        TransactionType.MATURITY_PAYOUT,
    }
)


class RoleType(str, Enum):
    OWNER = "OWNER"
    CO_OWNER = "CO_OWNER"
    JOINT_HOLDER = "JOINT_HOLDER"
    NOMINEE = "NOMINEE"
    GUARDIAN = "GUARDIAN"


class MaturityInstruction(str, Enum):
    PAYOUT_TO_LINKED_ACCOUNT = "PAYOUT_TO_LINKED_ACCOUNT"
    RENEW_PRINCIPAL_AND_INTEREST = "RENEW_PRINCIPAL_AND_INTEREST"
    CLOSE = "CLOSE"


class SearchKind(str, Enum):
    ACCOUNT_NUMBER = "ACCOUNT_NUMBER"
    CUSTOMER_ID = "CUSTOMER_ID"
    ACCOUNT_NAME = "ACCOUNT_NAME"

    @classmethod
    def parse(cls, value: "str | SearchKind") -> "SearchKind":
        if isinstance(value, SearchKind):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as e:
            raise ValidationError(f"Unsupported search kind: {value}") from e


class ChargeCalculationType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FLAT = "FLAT"
    INTEREST_DELTA = "INTEREST_DELTA"


class Frequency(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class BalanceType(str, Enum):
    FD_PRINCIPAL = "FD_PRINCIPAL"
    FD_INTEREST = "FD_INTEREST"
    PENALTY = "PENALTY"


class AlertType(str, Enum):
    ACCOUNT_CREATED = "ACCOUNT_CREATED"
    ACCOUNT_MODIFIED = "ACCOUNT_MODIFIED"
    ACCOUNT_HOLDER_ADDED = "ACCOUNT_HOLDER_ADDED"
    ACCOUNT_STATUS_CHANGED = "ACCOUNT_STATUS_CHANGED"


class CommunicationEventType(str, Enum):
    COMM_OPENING = "COMM_OPENING"
    COMM_MONTHLY_STATEMENT = "COMM_MONTHLY_STATEMENT"
    COMM_MATURITY_REMINDER = "COMM_MATURITY_REMINDER"
    COMM_INTEREST_CREDIT = "COMM_INTEREST_CREDIT"
