"""Account reports over the store."""

import logging
from datetime import date, datetime, time, timedelta

from fd_engine.clock import ClockProvider
from fd_engine.models import CLOSED_STATUSES, Account, AccountStatus
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)


def _window(start: date, end: date) -> tuple[datetime, datetime]:
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


class ReportService:
    """Maturity, opening and closure reports."""

    def __init__(self, store: AccountStore, clock: ClockProvider) -> None:
        self.store = store
        self.clock = clock

    def accounts_maturing_within(self, days: int) -> list[Account]:
        """ACTIVE accounts maturing between today and ``days`` days from now, inclusive."""
        today = self.clock.logical_date()
        horizon = today + timedelta(days=days)
        accounts = [
            a for a in self.store.find_by_status(AccountStatus.ACTIVE)
            if today <= a.maturity_date <= horizon
        ]
        return sorted(accounts, key=lambda a: (a.maturity_date, a.account_number))

    def accounts_created_between(self, start: date, end: date) -> list[Account]:
        lower, upper = _window(start, end)
        accounts = [a for a in self.store.all() if lower <= a.created_at < upper]
        return sorted(accounts, key=lambda a: a.created_at)

    def accounts_closed_between(
        self,
        start: date,
        end: date,
        status: AccountStatus | str | None = None,
    ) -> list[Account]:
        """Accounts closed in ``[start, end]``, optionally narrowed to one closed status.

        A status that is unknown or not a closed status yields an empty list.
        """
        if status is None:
            statuses = CLOSED_STATUSES
        else:
            try:
                parsed = AccountStatus(status.upper() if isinstance(status, str) else status)
            except ValueError:
                logger.warning("Unknown account status for closure report: %s", status)
                return []
            if parsed not in CLOSED_STATUSES:
                logger.warning("Status %s is not a closed status", parsed.value)
                return []
            statuses = frozenset({parsed})

        lower, upper = _window(start, end)
        accounts = [
            a for a in self.store.all()
            if a.status in statuses and a.closed_at is not None and lower <= a.closed_at < upper
        ]
        return sorted(accounts, key=lambda a: a.closed_at)
