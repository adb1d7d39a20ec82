"""Clock providers decoupling business logic from wall-clock time.

Every date or timestamp used by the engine comes from a ``ClockProvider``.
``SystemClock`` follows real time; ``LogicalClock`` holds a mutable instant
that tests and simulations can set and advance.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol

logger = logging.getLogger(__name__)


class ClockProvider(Protocol):
    """Source of the current logical date and time."""

    def logical_date(self) -> date: ...

    def logical_datetime(self) -> datetime: ...

    def logical_instant(self) -> datetime: ...


class SystemClock:
    """Clock backed by the real system time (local time zone)."""

    def logical_date(self) -> date:
        return datetime.now().date()

    def logical_datetime(self) -> datetime:
        return datetime.now()

    def logical_instant(self) -> datetime:
        return datetime.now(timezone.utc)


class LogicalClock:
    """Mutable clock for tests and simulations.

    The clock stores a timezone-aware UTC instant; dates and naive
    datetimes are derived from it in UTC so results do not depend on the
    host time zone.

    Parameters
    ----------
    start : datetime | date | None
        Initial logical time. ``None`` starts at the current system time.
    """

    def __init__(self, start: datetime | date | None = None) -> None:
        if start is None:
            self._instant = datetime.now(timezone.utc)
        else:
            self._instant = self._to_instant(start)
        logger.info("Logical clock initialized at %s", self._instant.isoformat())

    @staticmethod
    def _to_instant(value: datetime | date) -> datetime:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    def logical_date(self) -> date:
        return self._instant.date()

    def logical_datetime(self) -> datetime:
        return self._instant.replace(tzinfo=None)

    def logical_instant(self) -> datetime:
        return self._instant

    def set_logical_time(self, new_time: datetime) -> None:
        """Set the logical clock to a specific instant."""
        new_instant = self._to_instant(new_time)
        logger.info("Logical time changed from %s to %s", self._instant.isoformat(), new_instant.isoformat())
        self._instant = new_instant

    def set_logical_date(self, new_date: date) -> None:
        """Set the logical clock to the start of the given day."""
        self.set_logical_time(self._to_instant(new_date))

    def advance_time(self, duration: timedelta) -> None:
        """Move the logical clock forward by ``duration``."""
        old = self._instant
        self._instant = self._instant + duration
        logger.info("Logical time advanced by %s from %s to %s", duration, old.isoformat(), self._instant.isoformat())

    def advance_days(self, days: int) -> None:
        """Move the logical clock forward by whole days."""
        self.advance_time(timedelta(days=days))

    def reset_to_system_time(self) -> None:
        """Reset the logical clock to the current system time."""
        self._instant = datetime.now(timezone.utc)
        logger.info("Logical time reset to system time: %s", self._instant.isoformat())
