# backend/scheduler/services/slots/calculator.py
"""
Slot generation.

Produces bookable (start, employee_id) pairs for one calendar day from:
✓ employee availability rules for that weekday
✓ existing non-cancelled appointments (per assigned employee)
✓ blocked times (per employee)

Pure function: no database access, no side effects. Callers load the
inputs (see EmployeeAllocator / SchedulingService).
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable

from .config import BookingConfig, get_booking_config, time_str_to_minutes
from .overlap import busy_intervals_by_employee, overlaps_any


@dataclass(frozen=True, order=True)
class Slot:
    start: datetime
    employee_id: int


def generate_slots(
    target_date: date,
    duration_minutes: int,
    availability: Iterable,
    appointments: Iterable,
    blocked: Iterable,
    config: BookingConfig | None = None,
) -> list[Slot]:
    """
    Generate bookable slots for target_date.

    For every rule with is_available, candidate starts begin at the rule's
    start_time and advance by slot_step_minutes while the whole appointment
    (start + duration) still ends at or before the rule's end_time. A
    candidate is dropped when it overlaps an appointment or blocked time of
    the rule's employee.

    Employees contribute independently: the same start time appears once per
    free employee.

    Returns:
        Slots sorted by (start, employee_id). Empty list = nothing bookable.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    config = config or get_booking_config()
    step = config.slot_step_minutes
    day_start = datetime.combine(target_date, time.min)
    busy = busy_intervals_by_employee(appointments, blocked)

    seen: set[Slot] = set()
    for rule in availability:
        if not rule.is_available:
            continue

        start_min = time_str_to_minutes(rule.start_time)
        end_min = time_str_to_minutes(rule.end_time)
        employee_busy = busy.get(rule.employee_id, [])

        t = start_min
        while t + duration_minutes <= end_min:
            slot_start = day_start + timedelta(minutes=t)
            slot_end = slot_start + timedelta(minutes=duration_minutes)

            if not overlaps_any(slot_start, slot_end, employee_busy):
                seen.add(Slot(slot_start, rule.employee_id))

            t += step

    return sorted(seen)
