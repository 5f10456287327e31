"""
Interval overlap helpers.

Every interval is half-open: [start, end). Two intervals overlap iff
a.start < b.end and b.start < a.end, so back-to-back appointments never
conflict.
"""

from datetime import datetime, timedelta
from typing import Iterable

from ..lifecycle import AppointmentStatus

Interval = tuple[datetime, datetime]


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def appointment_interval(appointment) -> Interval:
    start = appointment.appointment_date
    return start, start + timedelta(minutes=appointment.duration)


def is_blocking(appointment) -> bool:
    """Every appointment except a cancelled one occupies its employee."""
    return appointment.status != AppointmentStatus.CANCELLED


def busy_intervals_by_employee(
    appointments: Iterable,
    blocked: Iterable,
) -> dict[int, list[Interval]]:
    """Group occupied intervals (appointments + blocked times) per employee."""
    busy: dict[int, list[Interval]] = {}

    for appt in appointments:
        if appt.assigned_employee_id is None or not is_blocking(appt):
            continue
        busy.setdefault(appt.assigned_employee_id, []).append(appointment_interval(appt))

    for block in blocked:
        busy.setdefault(block.employee_id, []).append(
            (block.start_datetime, block.end_datetime)
        )

    return busy


def overlaps_any(start: datetime, end: datetime, intervals: Iterable[Interval]) -> bool:
    return any(intervals_overlap(start, end, s, e) for s, e in intervals)


def interval_subtract(interval: Interval, block: Interval) -> list[Interval]:
    """
    Remove block from interval.

    Returns 0, 1 or 2 remaining pieces.
    """
    start, end = interval
    block_start, block_end = block

    if not intervals_overlap(start, end, block_start, block_end):
        return [interval]

    pieces = []
    if block_start > start:
        pieces.append((start, block_start))
    if block_end < end:
        pieces.append((block_end, end))
    return pieces


def is_fully_covered(interval: Interval, blocks: Iterable[Interval]) -> bool:
    """True when the union of blocks covers the whole interval."""
    remaining = [interval]
    for block in blocks:
        next_remaining = []
        for piece in remaining:
            next_remaining.extend(interval_subtract(piece, block))
        remaining = next_remaining
        if not remaining:
            return True
    return not remaining
