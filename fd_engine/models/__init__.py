"""Fixed deposit domain models."""

from fd_engine.models.account import Account, AccountHolder
from fd_engine.models.balance import BalanceEntry
from fd_engine.models.calculation import CalculationResult
from fd_engine.models.customer import CustomerProfile
from fd_engine.models.enums import (
    CLOSED_STATUSES,
    AccountStatus,
    AlertType,
    BalanceType,
    ChargeCalculationType,
    CommunicationEventType,
    Frequency,
    MaturityInstruction,
    RoleType,
    SearchKind,
    TransactionType,
)
from fd_engine.models.events import (
    AccountAlertEvent,
    AccountClosedEvent,
    AccountCreatedEvent,
    AccountMaturedEvent,
    CommunicationRequestedEvent,
    StatementNotification,
)
from fd_engine.models.product import (
    PenaltyCharge,
    ProductBalance,
    ProductCommunication,
    ProductConfig,
)
from fd_engine.models.statement import BatchResult, CurrentBalances, StatementData, StatementLine
from fd_engine.models.transaction import Transaction
from fd_engine.models.withdrawal import InquiryResult

__all__ = [
    "CLOSED_STATUSES",
    "Account",
    "AccountAlertEvent",
    "AccountClosedEvent",
    "AccountCreatedEvent",
    "AccountHolder",
    "AccountMaturedEvent",
    "AccountStatus",
    "AlertType",
    "BalanceEntry",
    "BalanceType",
    "BatchResult",
    "CalculationResult",
    "ChargeCalculationType",
    "CommunicationEventType",
    "CommunicationRequestedEvent",
    "CurrentBalances",
    "CustomerProfile",
    "Frequency",
    "InquiryResult",
    "MaturityInstruction",
    "PenaltyCharge",
    "ProductBalance",
    "ProductCommunication",
    "ProductConfig",
    "RoleType",
    "SearchKind",
    "StatementData",
    "StatementLine",
    "StatementNotification",
    "Transaction",
    "TransactionType",
]
