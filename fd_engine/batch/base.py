"""Per-account batch job runner."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from fd_engine.clock import ClockProvider
from fd_engine.models import Account, AccountStatus, Frequency
from fd_engine.services.notifications import Notifier
from fd_engine.sinks.base import EventSink
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)

QUARTER_START_MONTHS = (1, 4, 7, 10)

AfterCommit = Callable[[], Any]


@dataclass
class JobResult:
    """Counts from one job run."""

    processed: int = 0
    skipped: int = 0
    failed: int = 0
    failed_accounts: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.failed


def is_period_end(account: Account, frequency: str | None, today: date) -> bool:
    """Whether ``today`` closes a MONTHLY, QUARTERLY or YEARLY period for ``account``.

    Periods end on the 1st of the month, of a quarter (Jan, Apr, Jul, Oct)
    or of January. Nothing falls due on or before the effective date.
    """
    if frequency is None or today <= account.effective_date:
        return False
    if today.day != 1:
        return False
    if frequency == Frequency.MONTHLY.value:
        return True
    if frequency == Frequency.QUARTERLY.value:
        return today.month in QUARTER_START_MONTHS
    if frequency == Frequency.YEARLY.value:
        return today.month == 1
    logger.warning("Unknown frequency %s for account %s", frequency, account.account_number)
    return False


class AccountJob:
    """Run :meth:`process` for each candidate account in its own unit of work.

    ``process`` returns ``None`` to skip an account, or a list of actions to
    run once the unit of work has committed. A failing account is logged and
    counted; the job moves on to the next one.
    """

    name = "account-job"

    def __init__(self, store: AccountStore, sink: EventSink, clock: ClockProvider) -> None:
        self.store = store
        self.clock = clock
        self.notifier = Notifier(sink, clock)

    def candidates(self) -> list[Account]:
        return self.store.find_by_status(AccountStatus.ACTIVE)

    def process(self, account: Account) -> list[AfterCommit] | None:
        raise NotImplementedError

    def run(self) -> JobResult:
        result = JobResult()
        today = self.clock.logical_date()
        logger.info("Starting %s for %s", self.name, today)

        for candidate in self.candidates():
            number = candidate.account_number
            try:
                with self.store.unit_of_work():
                    account = self.store.get_for_update(number)
                    if account is None or account.status != AccountStatus.ACTIVE:
                        actions = None
                    else:
                        actions = self.process(account)
                if actions is None:
                    result.skipped += 1
                    continue
                for action in actions:
                    action()
                result.processed += 1
            except Exception:
                logger.exception("%s failed for account %s", self.name, number, extra={"account_number": number})
                result.failed += 1
                result.failed_accounts.append(number)

        logger.info(
            "%s complete: processed=%d, skipped=%d, failed=%d",
            self.name,
            result.processed,
            result.skipped,
            result.failed,
        )
        return result
