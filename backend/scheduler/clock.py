"""
Business clock.

All scheduling datetimes are naive wall-clock values in the single
configured business timezone. The clock is injected into the services so
"today" can be pinned in tests.
"""

from datetime import date, datetime, timedelta

import pytz

from .config import settings


class Clock:
    """Current time in the business timezone."""

    def __init__(self, tz_name: str | None = None):
        self.tz = pytz.timezone(tz_name or settings.business_timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz).replace(tzinfo=None, microsecond=0)

    def today(self) -> date:
        return self.now().date()

    def to_business_time(self, value: datetime) -> datetime:
        """Convert an aware datetime to naive business time; naive values pass through."""
        if value.tzinfo is None:
            return value
        return value.astimezone(self.tz).replace(tzinfo=None)


class FixedClock(Clock):
    """Clock pinned to a given moment."""

    def __init__(self, now: datetime, tz_name: str | None = None):
        super().__init__(tz_name)
        self._now = self.to_business_time(now)

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


def get_clock() -> Clock:
    """FastAPI dependency."""
    return Clock()
