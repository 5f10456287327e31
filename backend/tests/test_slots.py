"""
Tests for services/slots/calculator.py

Slot generation from availability rules, appointments and blocked times.
"""

import unittest
from datetime import date, datetime
from types import SimpleNamespace

from scheduler.services.slots import BookingConfig, Slot, day_of_week, generate_slots
from scheduler.services.slots.config import time_str_to_minutes

TUESDAY = date(2026, 10, 20)


def rule(employee_id=1, start="09:00", end="10:00", is_available=True):
    return SimpleNamespace(
        employee_id=employee_id,
        day_of_week=2,
        start_time=start,
        end_time=end,
        is_available=is_available,
    )


def appointment(start, duration=30, employee_id=1, status="pending", id=100):
    return SimpleNamespace(
        id=id,
        appointment_date=start,
        duration=duration,
        assigned_employee_id=employee_id,
        status=status,
    )


def block(start, end, employee_id=1):
    return SimpleNamespace(employee_id=employee_id, start_datetime=start, end_datetime=end)


def at(hour, minute=0):
    return datetime(2026, 10, 20, hour, minute)


class TestGenerateSlots(unittest.TestCase):

    def test_free_hour_yields_two_half_hour_slots(self):
        slots = generate_slots(TUESDAY, 30, [rule()], [], [])
        self.assertEqual(slots, [Slot(at(9), 1), Slot(at(9, 30), 1)])

    def test_existing_appointment_removes_its_slot(self):
        slots = generate_slots(TUESDAY, 30, [rule()], [appointment(at(9))], [])
        self.assertEqual(slots, [Slot(at(9, 30), 1)])

    def test_cancelled_appointment_does_not_block(self):
        slots = generate_slots(
            TUESDAY, 30, [rule()], [appointment(at(9), status="cancelled")], []
        )
        self.assertEqual(len(slots), 2)

    def test_back_to_back_is_allowed(self):
        # appointment 08:30-09:00 ends exactly when the window opens
        slots = generate_slots(TUESDAY, 30, [rule()], [appointment(at(8, 30))], [])
        self.assertIn(Slot(at(9), 1), slots)

    def test_slot_must_end_inside_window(self):
        slots = generate_slots(TUESDAY, 60, [rule()], [], [])
        self.assertEqual(slots, [Slot(at(9), 1)])

        self.assertEqual(generate_slots(TUESDAY, 90, [rule()], [], []), [])

    def test_blocked_time_removes_overlapping_slots(self):
        slots = generate_slots(
            TUESDAY, 30, [rule(end="11:00")], [], [block(at(9, 15), at(10))]
        )
        self.assertEqual(slots, [Slot(at(10), 1), Slot(at(10, 30), 1)])

    def test_other_employee_busy_time_is_ignored(self):
        slots = generate_slots(
            TUESDAY,
            30,
            [rule(employee_id=1)],
            [appointment(at(9), employee_id=2)],
            [block(at(9), at(10), employee_id=2)],
        )
        self.assertEqual(len(slots), 2)

    def test_unassigned_appointment_does_not_block(self):
        slots = generate_slots(TUESDAY, 30, [rule()], [appointment(at(9), employee_id=None)], [])
        self.assertEqual(len(slots), 2)

    def test_unavailable_rule_is_skipped(self):
        self.assertEqual(generate_slots(TUESDAY, 30, [rule(is_available=False)], [], []), [])

    def test_no_rules_no_slots(self):
        self.assertEqual(generate_slots(TUESDAY, 30, [], [], []), [])

    def test_multiple_employees_sorted_by_time_then_id(self):
        slots = generate_slots(
            TUESDAY, 30, [rule(employee_id=2), rule(employee_id=1)], [], []
        )
        self.assertEqual(
            slots,
            [Slot(at(9), 1), Slot(at(9), 2), Slot(at(9, 30), 1), Slot(at(9, 30), 2)],
        )

    def test_overlapping_rules_do_not_duplicate(self):
        slots = generate_slots(
            TUESDAY, 30, [rule(start="09:00", end="10:00"), rule(start="09:00", end="09:30")], [], []
        )
        self.assertEqual(slots, [Slot(at(9), 1), Slot(at(9, 30), 1)])

    def test_step_follows_config(self):
        slots = generate_slots(
            TUESDAY, 30, [rule()], [], [], BookingConfig(slot_step_minutes=15)
        )
        self.assertEqual([s.start for s in slots], [at(9), at(9, 15), at(9, 30)])

    def test_non_positive_duration_rejected(self):
        with self.assertRaises(ValueError):
            generate_slots(TUESDAY, 0, [rule()], [], [])


class TestSlotConfig(unittest.TestCase):

    def test_invalid_step_rejected(self):
        with self.assertRaises(ValueError):
            BookingConfig(slot_step_minutes=20)

    def test_day_of_week_counts_from_sunday(self):
        self.assertEqual(day_of_week(date(2026, 10, 18)), 0)
        self.assertEqual(day_of_week(TUESDAY), 2)
        self.assertEqual(day_of_week(date(2026, 10, 24)), 6)

    def test_time_str_to_minutes(self):
        self.assertEqual(time_str_to_minutes("09:30"), 570)
        self.assertEqual(time_str_to_minutes("24:00"), 1440)
        for bad in ("9:30", "25:00", "09:60", "noon"):
            with self.assertRaises(ValueError):
                time_str_to_minutes(bad)


if __name__ == "__main__":
    unittest.main()
