"""Domain events handed to the event sink."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar

from fd_engine.models.enums import AlertType


@dataclass(frozen=True)
class AccountCreatedEvent:
    """Published after an account is opened."""

    event_type: ClassVar[str] = "account.created"

    account_number: str
    customer_id: str
    principal_amount: Decimal
    maturity_date: date
    event_id: str


@dataclass(frozen=True)
class AccountClosedEvent:
    """Published after an account is closed before maturity."""

    event_type: ClassVar[str] = "account.closed"

    account_number: str
    reason_for_closure: str
    final_payout_amount: Decimal
    closure_date: date
    event_id: str
    customer_ids_to_notify: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AccountMaturedEvent:
    """Published when maturity processing marks an account MATURED."""

    event_type: ClassVar[str] = "account.matured"

    account_number: str
    maturity_amount: Decimal
    maturity_date: date
    event_id: str
    customer_ids_to_notify: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommunicationRequestedEvent:
    """Request to deliver a product-configured communication."""

    event_type: ClassVar[str] = "communication.requested"

    event_id: str
    account_number: str
    customer_id: str
    communication_type: str  # STATEMENT, ALERT, PROMOTIONAL, REGULATORY
    channel: str  # EMAIL, SMS, PUSH_NOTIFICATION, IN_APP
    communication_event: str  # COMM_OPENING, COMM_MONTHLY_STATEMENT, ...
    template: str
    template_variables: dict[str, str]
    timestamp: datetime


@dataclass(frozen=True)
class AccountAlertEvent:
    """Operational alert about an account change."""

    event_type: ClassVar[str] = "account.alert"

    account_number: str
    alert_type: AlertType
    alert_message: str
    customer_id: str
    timestamp: datetime
    event_id: str
    details: str = ""


@dataclass(frozen=True)
class StatementNotification:
    """Rendered statement ready for delivery."""

    event_type: ClassVar[str] = "statement.generated"

    account_number: str
    to_email: str
    to_sms: str | None
    subject: str
    body: str
    statement_type: str
    pdf_file_name: str
    period_start: date
    period_end: date
    generated_on: datetime
    customer_details: dict[str, Any]
    account_details: dict[str, Any]
    current_balances: dict[str, Any]
    transactions: list[dict[str, Any]]
