"""Premature withdrawal: penalty inquiry and execution."""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable

from fd_engine.clock import ClockProvider
from fd_engine.config import EngineConfig
from fd_engine.exceptions import InvalidStateError, NotFoundError, PolicyViolationError
from fd_engine.models import (
    Account,
    AccountClosedEvent,
    AccountStatus,
    AlertType,
    ChargeCalculationType,
    InquiryResult,
    ProductConfig,
    TransactionType,
)
from fd_engine.money import HUNDRED, accrue_simple_interest, days_between, quantize2
from fd_engine.providers import ProductProvider
from fd_engine.services.account_numbers import new_transaction_reference
from fd_engine.services.notifications import Notifier, new_event_id
from fd_engine.sinks.base import EventSink
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CLOSURE_REASON = "PREMATURE_WITHDRAWAL"


class WithdrawalService:
    """Quote and execute premature closure of ACTIVE accounts."""

    def __init__(
        self,
        store: AccountStore,
        products: ProductProvider,
        sink: EventSink,
        clock: ClockProvider,
        config: EngineConfig | None = None,
    ) -> None:
        self.store = store
        self.products = products
        self.clock = clock
        self.config = config or EngineConfig()
        self.notifier = Notifier(sink, clock)

    def inquiry(self, account_number: str) -> InquiryResult:
        """Figures for withdrawing ``account_number`` on the current logical date.

        Read-only and deterministic for a fixed account, product and date.

        Raises
        ------
        NotFoundError
            If the account does not exist.
        InvalidStateError
            If the account is not ACTIVE.
        """
        account = self.store.get(account_number)
        if account is None:
            raise NotFoundError(f"Account not found with number: {account_number}")
        self._require_active(account)
        return self._calculate(
            account,
            self.clock.logical_date(),
            lambda: self.products.get_product(account.product_code),
        )

    def execute(self, account_number: str, reason: str = CLOSURE_REASON) -> Account:
        """Close an ACTIVE account early, posting the penalty and the payout.

        The whole read-modify-write runs in one unit of work; a concurrent
        second call observes the closed status and fails with
        :class:`InvalidStateError`.

        Raises
        ------
        NotFoundError
            If the account does not exist.
        InvalidStateError
            If the account is not ACTIVE or was modified concurrently.
        PolicyViolationError
            If the product does not allow premature withdrawal.
        """
        with self.store.unit_of_work():
            account = self.store.get_for_update(account_number)
            if account is None:
                raise NotFoundError(f"Account not found with number: {account_number}")
            self._require_active(account)

            product = self.products.get_product(account.product_code)
            if not product.is_transaction_allowed(TransactionType.PREMATURE_WITHDRAWAL):
                raise PolicyViolationError(
                    f"Product {product.product_code} does not allow premature withdrawal",
                    code="TRANSACTION_NOT_ALLOWED",
                )

            result = self._calculate(account, self.clock.logical_date(), lambda: product)
            now = self.clock.logical_datetime()
            account.post_transaction(
                TransactionType.PENALTY_DEBIT,
                result.penalty_amount,
                now,
                new_transaction_reference(),
                "Penalty for premature withdrawal.",
            )
            account.post_transaction(
                TransactionType.PREMATURE_WITHDRAWAL,
                result.final_payout_amount,
                now,
                new_transaction_reference(),
                "Premature withdrawal payout.",
            )
            account.transition_to(AccountStatus.PREMATURELY_CLOSED, now)
            self.store.save(account)

        logger.info(
            "Account %s prematurely closed: reason=%s payout=%s penalty=%s",
            account_number,
            reason,
            result.final_payout_amount,
            result.penalty_amount,
            extra={"account_number": account_number},
        )

        self.notifier.publish(
            AccountClosedEvent(
                account_number=account_number,
                reason_for_closure=reason,
                final_payout_amount=result.final_payout_amount,
                closure_date=result.inquiry_date,
                event_id=new_event_id(),
                customer_ids_to_notify=account.customer_ids,
            )
        )
        self.notifier.alert(
            account,
            AlertType.ACCOUNT_STATUS_CHANGED,
            f"Account {account_number} closed before maturity",
            details=f"reason={reason}, payout={result.final_payout_amount}",
        )
        return account

    @staticmethod
    def _require_active(account: Account) -> None:
        if account.status != AccountStatus.ACTIVE:
            raise InvalidStateError(
                f"Premature withdrawal requires an ACTIVE account; "
                f"{account.account_number} is {account.status.value}"
            )

    def _calculate(
        self,
        account: Account,
        today: date,
        product_lookup: Callable[[], ProductConfig],
    ) -> InquiryResult:
        principal = account.principal_amount
        total_term_days = account.total_term_days
        days_active = days_between(account.effective_date, today)

        if days_active <= 0:
            return InquiryResult(
                account_number=account.account_number,
                original_principal=principal,
                interest_accrued_to_date=ZERO,
                penalty_amount=ZERO,
                final_payout_amount=principal,
                inquiry_date=today,
                days_active=days_active,
            )

        if total_term_days > 0:
            completion = Decimal(days_active) * HUNDRED / Decimal(total_term_days)
        else:
            completion = HUNDRED

        charge = product_lookup().penalty_charge_for(completion)
        penalty_rate = charge.amount if charge else self.config.default_penalty_rate
        penalty_interest_rate = max(ZERO, account.interest_rate - penalty_rate)

        original_interest = accrue_simple_interest(principal, account.interest_rate, days_active)
        penalized_interest = accrue_simple_interest(principal, penalty_interest_rate, days_active)

        if charge is not None and charge.calculation_type == ChargeCalculationType.PERCENTAGE:
            penalty = quantize2(principal * penalty_rate / HUNDRED)
        else:
            penalty = original_interest - penalized_interest

        final_payout = principal + penalized_interest - penalty
        logger.debug(
            "Inquiry %s: days=%d completion=%s charge=%s penalty=%s payout=%s",
            account.account_number,
            days_active,
            completion,
            charge.charge_code if charge else "default",
            penalty,
            final_payout,
        )
        return InquiryResult(
            account_number=account.account_number,
            original_principal=principal,
            interest_accrued_to_date=penalized_interest,
            penalty_amount=penalty,
            final_payout_amount=final_payout,
            inquiry_date=today,
            days_active=days_active,
            completion_percentage=quantize2(completion),
            penalty_rate=penalty_rate,
            original_interest_accrued=original_interest,
        )
