"""Periodic account statements."""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from fd_engine.clock import ClockProvider
from fd_engine.config import EngineConfig
from fd_engine.exceptions import NotFoundError, ValidationError
from fd_engine.models import (
    Account,
    AccountStatus,
    BalanceType,
    BatchResult,
    CommunicationEventType,
    CurrentBalances,
    CustomerProfile,
    StatementData,
    StatementLine,
    StatementNotification,
    Transaction,
)
from fd_engine.providers import CustomerProvider, ProductProvider
from fd_engine.sinks.base import EventSink
from fd_engine.sinks.serialization import to_dict
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
STATEMENT_TYPE = "FD_STATEMENT"


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min)


def render_template(
    template: str,
    account: Account,
    customer: CustomerProfile,
    opening_balance: Decimal,
    closing_balance: Decimal,
) -> str:
    """Substitute statement placeholders literally; unknown tokens stay as written."""
    placeholders = {
        "${CUSTOMER_NAME}": customer.first_name,
        "${PRODUCT_NAME}": account.account_name,
        "${LAST_4_DIGITS}": account.account_number[-4:],
        "${OPENING_BALANCE}": str(opening_balance),
        "${CLOSING_BALANCE}": str(closing_balance),
    }
    result = template
    for token, value in placeholders.items():
        result = result.replace(token, value)
    return result


def build_lines(transactions: list[Transaction]) -> list[StatementLine]:
    """Statement lines for ``transactions`` given oldest first.

    The running balance starts at zero and each line applies
    ``+credit - debit``.
    """
    lines = []
    running = ZERO
    for txn in transactions:
        if txn.amount > 0:
            credit, debit = txn.amount, ZERO
        else:
            credit, debit = ZERO, -txn.amount
        running = running + credit - debit
        lines.append(
            StatementLine(
                date=txn.transaction_date.date(),
                description=txn.display_description,
                debit=debit,
                credit=credit,
                running_balance=running,
                reference=txn.transaction_reference,
            )
        )
    return lines


class StatementService:
    """Aggregate ledgers into statements and publish statement notifications."""

    def __init__(
        self,
        store: AccountStore,
        products: ProductProvider,
        customers: CustomerProvider,
        sink: EventSink,
        clock: ClockProvider,
        config: EngineConfig | None = None,
    ) -> None:
        self.store = store
        self.products = products
        self.customers = customers
        self.sink = sink
        self.clock = clock
        self.config = config or EngineConfig()

    def build_statement(self, account: Account, period_start: date, period_end: date) -> StatementData:
        """Aggregate one account over ``[period_start, period_end]`` (whole days).

        Parameters
        ----------
        account : Account
            Account to summarize.
        period_start : date
            First day of the period.
        period_end : date
            Last day of the period, inclusive.

        Returns
        -------
        StatementData
            Period transactions (newest first), chronological lines with
            running balances, opening balance from the ledger and closing
            balance from the live balance buckets.
        """
        if period_end < period_start:
            raise ValidationError(f"Statement period ends ({period_end}) before it starts ({period_start})")

        number = account.account_number
        start = day_start(period_start)
        transactions = self.store.transactions_between(
            number, start, day_start(period_end + timedelta(days=1))
        )
        prior = self.store.transactions_between(number, day_start(account.effective_date), start)
        opening_balance = sum((t.amount for t in prior), ZERO)

        current = self.current_balances(number)
        return StatementData(
            account_number=number,
            period_start=period_start,
            period_end=period_end,
            opening_balance=opening_balance,
            closing_balance=current.closing_balance,
            current_balances=current,
            transactions=transactions,
            lines=build_lines(list(reversed(transactions))),
        )

    def current_balances(self, account_number: str) -> CurrentBalances:
        """Fold active balance entries into principal, interest and penalty."""
        buckets = {BalanceType.FD_PRINCIPAL.value: ZERO, BalanceType.FD_INTEREST.value: ZERO,
                   BalanceType.PENALTY.value: ZERO}
        for entry in self.store.balances(account_number):
            if entry.is_active and entry.balance_type in buckets:
                buckets[entry.balance_type] = entry.balance_amount
        return CurrentBalances(
            as_of=self.clock.logical_datetime(),
            principal=buckets[BalanceType.FD_PRINCIPAL.value],
            interest=buckets[BalanceType.FD_INTEREST.value],
            penalty=buckets[BalanceType.PENALTY.value],
        )

    def statement_template(self, account: Account) -> str:
        product = self.products.get_product(account.product_code)
        template = product.template_for(CommunicationEventType.COMM_MONTHLY_STATEMENT.value)
        return template if template else self.config.statement_template

    def generate_statement(
        self,
        account_number: str,
        period_start: date,
        period_end: date,
    ) -> StatementNotification:
        """Build, render and publish the statement for one account."""
        account = self.store.get(account_number)
        if account is None:
            raise NotFoundError(f"Account not found: {account_number}")
        owner = account.primary_customer_id
        if owner is None:
            raise ValidationError(f"Account {account_number} has no holders")

        customer = self.customers.get_customer(owner)
        data = self.build_statement(account, period_start, period_end)
        body = render_template(
            self.statement_template(account), account, customer,
            data.opening_balance, data.closing_balance,
        )
        notification = StatementNotification(
            account_number=account_number,
            to_email=customer.email,
            to_sms=customer.phone_number,
            subject=f"Your Fixed Deposit Statement - A/c No. ...{account_number[-5:]}",
            body=body,
            statement_type=STATEMENT_TYPE,
            pdf_file_name=f"FD_Statement_{account_number}_{period_end.year}-{period_end.month:02d}.pdf",
            period_start=period_start,
            period_end=period_end,
            generated_on=self.clock.logical_datetime(),
            customer_details=self._customer_details(customer),
            account_details=self._account_details(account),
            current_balances=to_dict(data.current_balances),
            transactions=[to_dict(line) for line in data.lines],
        )
        self.sink.publish(notification)
        logger.info(
            "Statement sent for account %s (%s to %s)",
            account_number,
            period_start,
            period_end,
            extra={"account_number": account_number},
        )
        return notification

    def generate_statements_for_all(self, period_start: date, period_end: date) -> BatchResult:
        """Generate statements for every ACTIVE account, isolating failures."""
        logger.info("Generating statements for all active accounts from %s to %s", period_start, period_end)
        result = BatchResult()
        for account in self.store.find_by_status(AccountStatus.ACTIVE):
            try:
                self.generate_statement(account.account_number, period_start, period_end)
                result.success_count += 1
            except Exception:
                logger.exception(
                    "Failed to generate statement for account: %s",
                    account.account_number,
                    extra={"account_number": account.account_number},
                )
                result.failure_count += 1
                result.failed_accounts.append(account.account_number)
        logger.info(
            "Statement generation completed. Success: %d, Failures: %d",
            result.success_count,
            result.failure_count,
        )
        return result

    @staticmethod
    def _customer_details(customer: CustomerProfile) -> dict[str, Any]:
        return {
            "customer_id": customer.customer_id,
            "customer_number": customer.customer_number,
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "date_of_birth": customer.date_of_birth.isoformat() if customer.date_of_birth else "",
            "phone_number": customer.phone_number,
            "email": customer.email,
            "address": {
                "line1": customer.address_line1,
                "line2": customer.address_line2,
                "city": customer.city,
                "state": customer.state,
                "country": customer.country,
                "postal_code": customer.postal_code,
            },
        }

    def _account_details(self, account: Account) -> dict[str, Any]:
        if account.tenure_value is not None and account.tenure_unit:
            tenure = f"{account.tenure_value} {account.tenure_unit}"
        else:
            tenure = "N/A"
        return {
            "account_number": account.account_number,
            "account_name": account.account_name,
            "status": account.status.value,
            "currency": account.currency or self.config.default_currency,
            "principal_amount": str(account.principal_amount),
            "maturity_amount": str(account.maturity_amount),
            "effective_date": account.effective_date.isoformat(),
            "maturity_date": account.maturity_date.isoformat(),
            "tenure": tenure,
            "interest_rate": str(account.interest_rate),
            "apy": str(account.apy) if account.apy is not None else None,
            "interest_type": account.interest_type or "COMPOUND",
            "compounding_frequency": account.compounding_frequency or "QUARTERLY",
        }
