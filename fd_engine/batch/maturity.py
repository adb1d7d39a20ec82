"""Maturity processing and renewal."""

import logging
from functools import partial

from fd_engine.batch.base import AccountJob, AfterCommit
from fd_engine.clock import ClockProvider
from fd_engine.config import EngineConfig
from fd_engine.models import (
    Account,
    AccountHolder,
    AccountMaturedEvent,
    AccountStatus,
    AlertType,
    MaturityInstruction,
    TransactionType,
)
from fd_engine.money import add_months, calculate_maturity_amount
from fd_engine.providers import ProductProvider
from fd_engine.services.account_numbers import AccountNumberGenerator, new_transaction_reference
from fd_engine.services.balances import seed_balances
from fd_engine.services.notifications import new_event_id
from fd_engine.sinks.base import EventSink
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)


class MaturityProcessingJob(AccountJob):
    """Mark due ACTIVE accounts MATURED, renewing them when instructed."""

    name = "maturity-processing"

    def __init__(
        self,
        store: AccountStore,
        products: ProductProvider,
        sink: EventSink,
        clock: ClockProvider,
        config: EngineConfig | None = None,
        number_generator: AccountNumberGenerator | None = None,
    ) -> None:
        super().__init__(store, sink, clock)
        self.products = products
        self.config = config or EngineConfig()
        self.numbers = number_generator or AccountNumberGenerator(store, self.config.branch_code)

    def candidates(self) -> list[Account]:
        today = self.clock.logical_date()
        return [a for a in super().candidates() if a.maturity_date <= today]

    def process(self, account: Account) -> list[AfterCommit] | None:
        now = self.clock.logical_datetime()
        actions: list[AfterCommit] = []

        if account.maturity_instruction == MaturityInstruction.RENEW_PRINCIPAL_AND_INTEREST:
            renewed = self._renew(account)
            product = self.products.get_product(renewed.product_code)
            actions.append(partial(seed_balances, self.store, renewed, product, now))
            actions.append(partial(self.notifier.publish, self.notifier.alert_event(
                renewed,
                AlertType.ACCOUNT_CREATED,
                f"FD account {renewed.account_number} renewed from matured account {account.account_number}",
                details=f"Original Account: {account.account_number}, "
                f"New Principal: {renewed.principal_amount}, New Maturity Date: {renewed.maturity_date}",
            )))

        account.transition_to(AccountStatus.MATURED, now)
        self.store.save(account)
        logger.info(
            "Account %s matured (instruction=%s)",
            account.account_number,
            account.maturity_instruction.value,
            extra={"account_number": account.account_number},
        )

        matured = AccountMaturedEvent(
            account_number=account.account_number,
            maturity_amount=account.maturity_amount,
            maturity_date=account.maturity_date,
            event_id=new_event_id(),
            customer_ids_to_notify=account.customer_ids,
        )
        alert = self.notifier.alert_event(
            account,
            AlertType.ACCOUNT_STATUS_CHANGED,
            f"Account {account.account_number} has matured",
            details=f"Maturity Amount: {account.maturity_amount}, Maturity Date: {account.maturity_date}, "
            f"Instruction: {account.maturity_instruction.value}",
        )
        return [partial(self.notifier.publish, matured), partial(self.notifier.publish, alert), *actions]

    def _renew(self, account: Account) -> Account:
        """Open a successor account funded with the maturity amount."""
        today = self.clock.logical_date()
        now = self.clock.logical_datetime()
        principal = account.maturity_amount
        renewed = Account(
            account_number=self.numbers.generate(),
            account_name=account.account_name,
            product_code=account.product_code,
            status=AccountStatus.ACTIVE,
            term_in_months=account.term_in_months,
            interest_rate=account.interest_rate,
            principal_amount=principal,
            maturity_amount=calculate_maturity_amount(principal, account.interest_rate, account.term_in_months),
            effective_date=today,
            maturity_date=add_months(today, account.term_in_months),
            created_at=now,
            maturity_instruction=account.maturity_instruction,
            payout_account_number=account.payout_account_number,
            effective_rate=account.effective_rate,
            apy=account.apy,
            payout_freq=account.payout_freq,
            category1_id=account.category1_id,
            category2_id=account.category2_id,
            tenure_value=account.tenure_value,
            tenure_unit=account.tenure_unit,
            currency=account.currency,
            interest_type=account.interest_type,
            compounding_frequency=account.compounding_frequency,
        )
        for holder in account.holders:
            renewed.add_holder(AccountHolder(holder.customer_id, holder.role_type, holder.ownership_percentage))
        renewed.post_transaction(
            TransactionType.RENEWAL_DEPOSIT,
            principal,
            now,
            new_transaction_reference(),
            f"Renewal of matured account {account.account_number}.",
        )
        self.store.save(renewed)
        logger.info(
            "Renewed account %s as %s with principal %s",
            account.account_number,
            renewed.account_number,
            principal,
            extra={"account_number": renewed.account_number},
        )
        return renewed
