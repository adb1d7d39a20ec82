"""Interest accrual and interest payout jobs."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import partial

from fd_engine.batch.base import AccountJob, AfterCommit, is_period_end
from fd_engine.models import Account, AlertType, BalanceEntry, BalanceType, Frequency, TransactionType
from fd_engine.money import HUNDRED, TEN_PLACES, quantize4
from fd_engine.services.account_numbers import new_transaction_reference

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

PERIODS_PER_YEAR = {
    Frequency.MONTHLY.value: Decimal("12"),
    Frequency.QUARTERLY.value: Decimal("4"),
    Frequency.YEARLY.value: Decimal("1"),
}


def compound_period_total(principal: Decimal, interest: Decimal, annual_rate: Decimal, frequency: str) -> Decimal:
    """``(1 + rate / (periods * 100)) * (interest + principal)``, rounded to 4 places.

    Unknown frequencies compound yearly.
    """
    periods = PERIODS_PER_YEAR.get(frequency, Decimal("1"))
    rate_component = (annual_rate / (periods * HUNDRED)).quantize(TEN_PLACES, rounding=ROUND_HALF_UP)
    return quantize4((Decimal(1) + rate_component) * (interest + principal))


class InterestAccrualJob(AccountJob):
    """Compound interest into FD_INTEREST at each compounding period end."""

    name = "interest-accrual"

    def process(self, account: Account) -> list[AfterCommit] | None:
        today = self.clock.logical_date()
        frequency = account.compounding_frequency
        if not is_period_end(account, frequency, today):
            return None

        now = self.clock.logical_datetime()
        entry = self.store.balance(account.account_number, BalanceType.FD_INTEREST.value)
        accrued = entry.balance_amount if entry is not None else ZERO
        rate = account.effective_rate if account.effective_rate is not None else account.interest_rate

        new_total = compound_period_total(account.principal_amount, accrued, rate, frequency)
        earned = quantize4(new_total - (accrued + account.principal_amount))
        if earned <= 0:
            return None

        if entry is None:
            entry = BalanceEntry(
                account_number=account.account_number,
                balance_type=BalanceType.FD_INTEREST.value,
                balance_amount=ZERO,
                created_at=now,
            )
        entry.balance_amount = accrued + earned
        entry.updated_at = now

        txn = account.post_transaction(
            TransactionType.INTEREST_ACCRUAL,
            earned,
            now,
            new_transaction_reference(),
            f"{frequency} compound interest accrual.",
        )
        account.updated_at = now
        self.store.save(account)
        self.store.save_balance(entry)

        logger.info(
            "Accrued interest for account %s: frequency=%s earned=%s",
            account.account_number,
            frequency,
            earned,
            extra={"account_number": account.account_number},
        )
        alert = self.notifier.alert_event(
            account,
            AlertType.ACCOUNT_MODIFIED,
            f"Interest of {earned} has been accrued to your fixed deposit.",
            details=f"Transaction Type: {txn.transaction_type.value}, Amount: {earned}, "
            f"Reference: {txn.transaction_reference}",
        )
        return [partial(self.notifier.publish, alert)]


class InterestPayoutJob(AccountJob):
    """Pay out the FD_INTEREST balance on payout dates and reset it to zero."""

    name = "interest-payout"

    def candidates(self) -> list[Account]:
        return [a for a in super().candidates() if a.payout_freq is not None]

    def process(self, account: Account) -> list[AfterCommit] | None:
        today = self.clock.logical_date()
        if not is_period_end(account, account.payout_freq, today):
            return None

        entry = self.store.balance(account.account_number, BalanceType.FD_INTEREST.value)
        if entry is None or entry.balance_amount <= 0:
            logger.info("No interest to pay out for account %s", account.account_number)
            return None

        now = self.clock.logical_datetime()
        amount = entry.balance_amount
        entry.balance_amount = ZERO
        entry.updated_at = now

        txn = account.post_transaction(
            TransactionType.INTEREST_PAYOUT,
            amount,
            now,
            new_transaction_reference(),
            f"{account.payout_freq} interest payout - paid to customer account.",
        )
        account.updated_at = now
        self.store.save(account)
        self.store.save_balance(entry)

        logger.info(
            "Paid out interest for account %s: frequency=%s amount=%s",
            account.account_number,
            account.payout_freq,
            amount,
            extra={"account_number": account.account_number},
        )
        alert = self.notifier.alert_event(
            account,
            AlertType.ACCOUNT_MODIFIED,
            f"Interest payout of {amount} has been credited to your account.",
            details=f"Transaction Type: {txn.transaction_type.value}, Amount: {amount}, "
            f"Reference: {txn.transaction_reference}, Payout Frequency: {account.payout_freq}",
        )
        return [partial(self.notifier.publish, alert)]
