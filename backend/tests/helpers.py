"""Shared fixtures for the scheduler tests."""

import itertools
from datetime import datetime, timedelta

from sqlalchemy.orm import sessionmaker

from scheduler.database import create_db_engine, init_db
from scheduler.models import Appointments, BlockedTimes, EmployeeAvailability, Employees
from scheduler.services.notifier import Notifier

# Monday; the next day is a Tuesday (day_of_week 2)
NOW = datetime(2026, 10, 19, 10, 0)
TUESDAY = datetime(2026, 10, 20)

_tokens = itertools.count(1)


def make_session_factory(url: str = "sqlite://"):
    engine = create_db_engine(url)
    init_db(engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingNotifier(Notifier):
    """Keeps (method, appointment id) pairs instead of delivering."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def _record(self, name, appointment, *extra):
        if self.fail:
            raise RuntimeError("delivery backend down")
        self.calls.append((name, appointment.id, *extra))
        return True

    def send_booking_received(self, appointment):
        return self._record("booking_received", appointment)

    def send_admin_alert(self, appointment):
        return self._record("admin_alert", appointment)

    def send_confirmation(self, appointment):
        return self._record("confirmation", appointment)

    def send_cancellation(self, appointment):
        return self._record("cancellation", appointment)

    def send_reschedule_request(self, appointment, message):
        return self._record("reschedule_request", appointment, message)

    def send_employee_assignment(self, employee, appointment):
        return self._record("employee_assignment", appointment, employee.id)

    def send_reminder(self, appointment):
        return self._record("reminder", appointment)

    def names(self):
        return [call[0] for call in self.calls]


def add_employee(db, employee_id, name=None, is_active=True):
    employee = Employees(id=employee_id, name=name or f"Employee {employee_id}", is_active=is_active)
    db.add(employee)
    db.commit()
    return employee


def add_rule(db, employee_id, day_of_week, start_time, end_time, is_available=True):
    rule = EmployeeAvailability(
        employee_id=employee_id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        is_available=is_available,
    )
    db.add(rule)
    db.commit()
    return rule


def add_appointment(db, start, duration=60, employee_id=None, status="pending", token=None):
    appointment = Appointments(
        client_name="Existing Client",
        client_email="existing@example.com",
        client_phone="555-0100",
        client_language="en",
        appointment_type="consultation",
        appointment_date=start,
        appointment_end=start + timedelta(minutes=duration),
        duration=duration,
        status=status,
        assigned_employee_id=employee_id,
        cancellation_token=token or f"existing-token-{next(_tokens)}",
    )
    db.add(appointment)
    db.commit()
    return appointment


def add_block(db, employee_id, start, end, reason="Vacation"):
    block = BlockedTimes(
        employee_id=employee_id,
        start_datetime=start,
        end_datetime=end,
        reason=reason,
    )
    db.add(block)
    db.commit()
    return block


def booking_request(**overrides):
    data = {
        "client_name": "Jane Doe",
        "client_email": "jane@example.com",
        "client_phone": "555-0123",
        "appointment_type": "consultation",
        "appointment_date": "2026-10-20T09:00:00",
        "duration": 60,
    }
    data.update(overrides)
    return data
