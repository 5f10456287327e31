"""
Employee allocation.

Picks the employee for a booking request: the lowest employee id whose
generated slots for the day contain the exact requested start time.
Stable ordering keeps allocation reproducible for identical data.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from .repositories import AppointmentRepository, AvailabilityRepository, BlockedTimeRepository
from .slots import BookingConfig, Slot, day_of_week, generate_slots, get_booking_config


class EmployeeAllocator:

    def __init__(self, db: Session, config: BookingConfig | None = None):
        self.config = config or get_booking_config()
        self.availability = AvailabilityRepository(db)
        self.appointments = AppointmentRepository(db)
        self.blocked = BlockedTimeRepository(db)

    def slots_for_day(self, target_date: date, duration_minutes: int) -> list[Slot]:
        """Load the day's rules, appointments and blocks and run the slot generator."""
        rules = self.availability.list_for_day(day_of_week(target_date))
        if not rules:
            return []

        day_start = datetime.combine(target_date, time.min)
        day_end = day_start + timedelta(days=1)

        return generate_slots(
            target_date,
            duration_minutes,
            rules,
            self.appointments.list_active_between(day_start, day_end),
            self.blocked.list_between(day_start, day_end),
            self.config,
        )

    def candidate_employees(
        self,
        target_date: date,
        start_time: time,
        duration_minutes: int,
    ) -> list[int]:
        """All employees free at exactly start_time, ascending by id."""
        requested = datetime.combine(target_date, start_time)
        return sorted({
            slot.employee_id
            for slot in self.slots_for_day(target_date, duration_minutes)
            if slot.start == requested
        })

    def find_employee_for(
        self,
        target_date: date,
        start_time: time,
        duration_minutes: int,
    ) -> Optional[int]:
        """Lowest-id free employee, or None when the request must stay unassigned."""
        candidates = self.candidate_employees(target_date, start_time, duration_minutes)
        return candidates[0] if candidates else None
