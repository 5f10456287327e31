# backend/scheduler/services/slots/config.py
"""
Slot grid configuration and "HH:MM" helpers.
"""

import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for slot generation.

    Attributes:
        slot_step_minutes: Distance between candidate start times (15/30/60)
    """
    slot_step_minutes: int = 30  # 15 / 30 / 60

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton)."""
    return BookingConfig()


def time_str_to_minutes(value: str) -> int:
    """
    "HH:MM" -> minutes since midnight.

    "24:00" is accepted as the end of the day.
    """
    match = _TIME_RE.match(value or "")
    if not match:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes

def day_of_week(target_date: date) -> int:
    """Weekday number used by availability rules: 0 = Sunday ... 6 = Saturday."""
    return target_date.isoweekday() % 7
