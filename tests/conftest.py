"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fd_engine.clock import LogicalClock
from fd_engine.config import EngineConfig
from fd_engine.models import (
    Account,
    BalanceType,
    CalculationResult,
    ChargeCalculationType,
    CommunicationEventType,
    CustomerProfile,
    PenaltyCharge,
    ProductBalance,
    ProductCommunication,
    ProductConfig,
    RoleType,
    TransactionType,
)
from fd_engine.providers import StaticCalculationProvider, StaticCustomerDirectory, StaticProductCatalog
from fd_engine.services import AccountService, ReportService, StatementService, WithdrawalService
from fd_engine.sinks.memory import InMemoryEventSink
from fd_engine.store.memory import InMemoryAccountStore

START = datetime(2023, 1, 1, 9, 30)
PRODUCT_CODE = "FD-STD"
STATEMENT_TEMPLATE = "Hi ${CUSTOMER_NAME}, ${PRODUCT_NAME} xx${LAST_4_DIGITS}: ${OPENING_BALANCE} -> ${CLOSING_BALANCE}"


def make_product(
    code: str = PRODUCT_CODE,
    charges: tuple[PenaltyCharge, ...] | None = None,
    allow_premature: bool = True,
    communications: tuple[ProductCommunication, ...] | None = None,
) -> ProductConfig:
    """Product with principal, interest and penalty buckets plus an inactive bonus bucket."""
    transactions = set(TransactionType)
    if not allow_premature:
        transactions.discard(TransactionType.PREMATURE_WITHDRAWAL)
    if charges is None:
        charges = (
            PenaltyCharge("PEN-EARLY", ChargeCalculationType.INTEREST_DELTA, Decimal("2.00"),
                          Decimal("0"), Decimal("50")),
            PenaltyCharge("PEN-LATE", ChargeCalculationType.PERCENTAGE, Decimal("1.00"),
                          Decimal("50"), Decimal("100")),
        )
    if communications is None:
        communications = (
            ProductCommunication("OPEN-EMAIL", CommunicationEventType.COMM_OPENING.value, "Welcome ${ACCOUNT_NUMBER}"),
            ProductCommunication("OPEN-SMS", CommunicationEventType.COMM_OPENING.value, "FD opened", channel="SMS"),
            ProductCommunication("STMT", CommunicationEventType.COMM_MONTHLY_STATEMENT.value, STATEMENT_TEMPLATE,
                                 communication_type="STATEMENT"),
        )
    return ProductConfig(
        product_code=code,
        product_name="Standard FD",
        currency="INR",
        interest_type="COMPOUND",
        compounding_frequency="QUARTERLY",
        roles=frozenset({RoleType.OWNER, RoleType.CO_OWNER, RoleType.NOMINEE, RoleType.JOINT_HOLDER}),
        transactions=frozenset(transactions),
        balances=(
            ProductBalance(BalanceType.FD_PRINCIPAL.value),
            ProductBalance(BalanceType.FD_INTEREST.value),
            ProductBalance(BalanceType.PENALTY.value),
            ProductBalance("BONUS", is_active=False),
        ),
        charges=charges,
        communications=communications,
    )


def make_calculation(
    calc_id: int = 1,
    maturity_value: str = "107500.00",
    rate: str = "7.50",
    maturity_date: date = date(2024, 1, 1),
    product_code: str = PRODUCT_CODE,
    principal: str | None = None,
    payout_freq: str | None = "QUARTERLY",
) -> CalculationResult:
    """12-month 7.50% quote maturing at 107500.00 (principal 100000)."""
    return CalculationResult(
        maturity_value=Decimal(maturity_value),
        maturity_date=maturity_date,
        product_code=product_code,
        effective_rate=Decimal(rate),
        apy=Decimal(rate),
        payout_freq=payout_freq,
        calc_id=calc_id,
        result_id=calc_id,
        principal_amount=Decimal(principal) if principal is not None else None,
        tenure_value=12,
        tenure_unit="MONTHS",
    )


@pytest.fixture
def clock() -> LogicalClock:
    """Logical clock starting 2023-01-01 09:30 UTC."""
    return LogicalClock(START)


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def sink() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(clock_mode="logical", event_sink="memory")


@pytest.fixture
def product() -> ProductConfig:
    return make_product()


@pytest.fixture
def products(product: ProductConfig) -> StaticProductCatalog:
    return StaticProductCatalog({product.product_code: product})


@pytest.fixture
def customers() -> StaticCustomerDirectory:
    directory = StaticCustomerDirectory()
    directory.add(CustomerProfile("cust-001", "Asha", "Rao", "asha@example.com", "+91 9000000001"))
    directory.add(CustomerProfile("cust-002", "Vikram", "Shah", "vikram@example.com"))
    directory.add(CustomerProfile("cust-003", "Meera", "Iyer", "meera@example.com"))
    return directory


@pytest.fixture
def calculations() -> StaticCalculationProvider:
    provider = StaticCalculationProvider()
    provider.add(make_calculation())
    return provider


@pytest.fixture
def account_service(store, products, calculations, sink, clock, config) -> AccountService:
    return AccountService(store, products, calculations, sink, clock, config)


@pytest.fixture
def withdrawal_service(store, products, sink, clock, config) -> WithdrawalService:
    return WithdrawalService(store, products, sink, clock, config)


@pytest.fixture
def statement_service(store, products, customers, sink, clock, config) -> StatementService:
    return StatementService(store, products, customers, sink, clock, config)


@pytest.fixture
def report_service(store, clock) -> ReportService:
    return ReportService(store, clock)


@pytest.fixture
def opened_account(account_service: AccountService) -> Account:
    """ACTIVE account for cust-001: 100000 at 7.50%, 2023-01-01 to 2024-01-01 (365 days)."""
    return account_service.create_account(make_calculation(), "Asha Savings FD", "cust-001")


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible generated data."""
    return 42
