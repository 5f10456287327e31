"""
Repositories for the scheduling tables.

Repositories never commit: the scheduling service owns the transaction so
an overlap check and the write that depends on it share one unit of work.
Driver errors surface as StorageError.
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageError
from ..models import Appointments, BlockedTimes, EmployeeAvailability, Employees
from .lifecycle import AppointmentStatus

logger = logging.getLogger(__name__)


def _storage_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Storage error in {func.__qualname__}: {e}")
            raise StorageError(f"Storage failure in {func.__name__}") from e
    return wrapper


class _Repository:
    model = None

    def __init__(self, db: Session):
        self.db = db

    @_storage_errors
    def get(self, obj_id: int):
        return self.db.get(self.model, obj_id)

    @_storage_errors
    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    @_storage_errors
    def update(self, obj, **updates):
        for key, value in updates.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        self.db.flush()
        return obj

    @_storage_errors
    def delete(self, obj) -> None:
        self.db.delete(obj)
        self.db.flush()


class EmployeeDirectory(_Repository):
    """Read-only view of the personnel directory."""

    model = Employees

    @_storage_errors
    def get_many(self, employee_ids: Iterable[int]) -> dict[int, Employees]:
        ids = set(employee_ids)
        if not ids:
            return {}
        rows = self.db.query(Employees).filter(Employees.id.in_(ids)).all()
        return {row.id: row for row in rows}


class AvailabilityRepository(_Repository):
    model = EmployeeAvailability

    @_storage_errors
    def list_for_day(self, day_of_week: int) -> list[EmployeeAvailability]:
        """Rules of active employees for one weekday, ordered by employee."""
        return (
            self.db.query(EmployeeAvailability)
            .join(Employees, EmployeeAvailability.employee_id == Employees.id)
            .filter(
                EmployeeAvailability.day_of_week == day_of_week,
                Employees.is_active.is_(True),
            )
            .order_by(EmployeeAvailability.employee_id, EmployeeAvailability.start_time)
            .all()
        )

    @_storage_errors
    def list_all(self, employee_id: Optional[int] = None) -> list[EmployeeAvailability]:
        query = self.db.query(EmployeeAvailability)
        if employee_id is not None:
            query = query.filter(EmployeeAvailability.employee_id == employee_id)
        return query.order_by(
            EmployeeAvailability.employee_id,
            EmployeeAvailability.day_of_week,
            EmployeeAvailability.start_time,
        ).all()


class BlockedTimeRepository(_Repository):
    model = BlockedTimes

    @_storage_errors
    def list_between(
        self,
        start: datetime,
        end: datetime,
        employee_id: Optional[int] = None,
    ) -> list[BlockedTimes]:
        """Blocked times intersecting [start, end)."""
        query = self.db.query(BlockedTimes).filter(
            BlockedTimes.start_datetime < end,
            BlockedTimes.end_datetime > start,
        )
        if employee_id is not None:
            query = query.filter(BlockedTimes.employee_id == employee_id)
        return query.order_by(BlockedTimes.start_datetime).all()

    @_storage_errors
    def list_all(self, employee_id: Optional[int] = None) -> list[BlockedTimes]:
        query = self.db.query(BlockedTimes)
        if employee_id is not None:
            query = query.filter(BlockedTimes.employee_id == employee_id)
        return query.order_by(BlockedTimes.start_datetime).all()


class AppointmentRepository(_Repository):
    model = Appointments

    @_storage_errors
    def get_by_token(self, token: str) -> Optional[Appointments]:
        return (
            self.db.query(Appointments)
            .filter(Appointments.cancellation_token == token)
            .first()
        )

    @_storage_errors
    def list_active_between(self, start: datetime, end: datetime) -> list[Appointments]:
        """Assigned, non-cancelled appointments intersecting [start, end)."""
        return (
            self.db.query(Appointments)
            .filter(
                Appointments.assigned_employee_id.isnot(None),
                Appointments.status != AppointmentStatus.CANCELLED.value,
                Appointments.appointment_date < end,
                Appointments.appointment_end > start,
            )
            .order_by(Appointments.appointment_date)
            .all()
        )

    @_storage_errors
    def find_conflicts(
        self,
        employee_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[int] = None,
    ) -> list[Appointments]:
        query = self.db.query(Appointments).filter(
            Appointments.assigned_employee_id == employee_id,
            Appointments.status != AppointmentStatus.CANCELLED.value,
            Appointments.appointment_date < end,
            Appointments.appointment_end > start,
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointments.id != exclude_appointment_id)
        return query.all()

    @_storage_errors
    def list_all(
        self,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Appointments]:
        query = self.db.query(Appointments)
        if status:
            query = query.filter(Appointments.status == status)
        if start is not None:
            query = query.filter(Appointments.appointment_date >= start)
        if end is not None:
            query = query.filter(Appointments.appointment_date < end)
        return query.order_by(Appointments.appointment_date).all()

    @_storage_errors
    def lock_employee_schedule(self, employee_id: int) -> None:
        """
        Serialize writers touching one employee's schedule.

        PostgreSQL: transaction-scoped advisory lock keyed by employee id.
        SQLite: transactions already start with BEGIN IMMEDIATE (see database.py).
        """
        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": employee_id},
            )

    @_storage_errors
    def list_starting_between(
        self,
        start: datetime,
        end: datetime,
        statuses: Iterable[str],
    ) -> list[Appointments]:
        """Appointments in the given statuses whose start is in [start, end)."""
        return (
            self.db.query(Appointments)
            .filter(
                Appointments.status.in_(list(statuses)),
                Appointments.appointment_date >= start,
                Appointments.appointment_date < end,
            )
            .order_by(Appointments.appointment_date)
            .all()
        )
