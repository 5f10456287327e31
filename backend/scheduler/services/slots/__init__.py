# backend/scheduler/services/slots/__init__.py
"""
Slot calculation module.

calculator: pure slot generation for one day
overlap: half-open interval helpers shared with the booking checks
"""

from .config import BookingConfig, get_booking_config, day_of_week
from .calculator import Slot, generate_slots
from .overlap import intervals_overlap, is_fully_covered

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "day_of_week",
    "Slot",
    "generate_slots",
    "intervals_overlap",
    "is_fully_covered",
]
