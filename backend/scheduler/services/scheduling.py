"""
Scheduling service.

Orchestrates booking, cancellation, status changes, reassignment and the
calendar reads on top of the slot generator, the allocator and the
lifecycle state machine.

Every mutating operation is one unit of work:
    1. read + overlap check (under the per-employee write lock)
    2. write
    3. commit
    4. post-commit hooks (notifications; failures are logged, never raised)
"""

import calendar
import logging
import re
import secrets
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from functools import partial
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..clock import Clock
from ..config import settings
from ..errors import AlreadyCancelled, Conflict, NotFound, StorageError, ValidationError
from ..models import Appointments, BlockedTimes, EmployeeAvailability, Employees
from ..schemas.appointments import AppointmentType
from . import lifecycle
from .allocator import EmployeeAllocator
from .lifecycle import AppointmentStatus, PostCommitHook, TERMINAL_STATUSES
from .notifier import Notifier, cancellation_url, reschedule_url
from .repositories import (
    AppointmentRepository,
    AvailabilityRepository,
    BlockedTimeRepository,
    EmployeeDirectory,
)
from .slots import BookingConfig, day_of_week, get_booking_config, is_fully_covered
from .slots.config import MINUTES_PER_DAY, time_str_to_minutes
from .slots.overlap import appointment_interval

logger = logging.getLogger(__name__)

REQUIRED_BOOKING_FIELDS = (
    "client_name",
    "client_email",
    "client_phone",
    "appointment_type",
    "appointment_date",
)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_CANCEL_REASON = "Client requested cancellation"
DEFAULT_LANGUAGE = "en"


class SchedulingService:
    """Entry point for the API layer."""

    def __init__(
        self,
        db: Session,
        notifier: Notifier,
        clock: Clock | None = None,
        config: BookingConfig | None = None,
        base_url: str | None = None,
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock or Clock()
        self.config = config or get_booking_config()
        self.base_url = base_url

        self.employees = EmployeeDirectory(db)
        self.availability = AvailabilityRepository(db)
        self.blocked = BlockedTimeRepository(db)
        self.appointments = AppointmentRepository(db)
        self.allocator = EmployeeAllocator(db, self.config)

    # ── Calendar reads ──────────────────────────────────────────────────

    def list_available_dates(self, year: int, month: int) -> set[date]:
        """
        Dates of the month a client may pick.

        A date qualifies when it is today or later, at least one available
        rule exists for its weekday, and not every scheduled employee is
        blocked for all of their windows that day.
        """
        if not 1 <= month <= 12:
            raise ValidationError("month", "Month must be between 1 and 12")
        if year < 1:
            raise ValidationError("year", "Invalid year")

        today = self.clock.today()
        _, days_in_month = calendar.monthrange(year, month)
        month_start = datetime(year, month, 1)
        month_end = month_start + timedelta(days=days_in_month)

        rules_by_weekday: dict[int, list[EmployeeAvailability]] = {}
        month_blocks = self.blocked.list_between(month_start, month_end)

        available = set()
        for day in range(1, days_in_month + 1):
            current = date(year, month, day)
            if current < today:
                continue

            weekday = day_of_week(current)
            if weekday not in rules_by_weekday:
                rules_by_weekday[weekday] = [
                    r for r in self.availability.list_for_day(weekday) if r.is_available
                ]
            rules = rules_by_weekday[weekday]
            if not rules:
                continue

            if self._is_fully_blocked(current, rules, month_blocks):
                continue
            available.add(current)

        return available

    def list_available_slots(
        self,
        target_date: date,
        duration_minutes: Optional[int] = None,
    ) -> list[dict]:
        """Bookable (time, employee) pairs for one day with employee names."""
        duration = self._validate_duration(duration_minutes)
        slots = self.allocator.slots_for_day(target_date, duration)
        names = self.employees.get_many(slot.employee_id for slot in slots)

        return [
            {
                "time": slot.start,
                "employee_id": slot.employee_id,
                "employee_name": names[slot.employee_id].name if slot.employee_id in names else None,
            }
            for slot in slots
        ]

    # ── Booking ─────────────────────────────────────────────────────────

    def book(self, request: Any) -> Appointments:
        """
        Book an appointment from a public request.

        The allocator is re-run here on every call; a slot the client picked
        earlier is only a hint. Without a free employee the appointment is
        stored unassigned for manual assignment.
        """
        data = self._validate_booking(request)
        start = data["appointment_date"]
        duration = data["duration"]

        with self._unit_of_work() as hooks:
            employee_id = self._allocate(start, duration)

            appointment = Appointments(
                client_name=data["client_name"],
                client_email=data["client_email"],
                client_phone=data["client_phone"],
                client_language=data["client_language"],
                appointment_type=data["appointment_type"],
                appointment_date=start,
                appointment_end=start + timedelta(minutes=duration),
                duration=duration,
                status=lifecycle.INITIAL_STATUS.value,
                location_address=data["location_address"],
                notes=data["notes"],
                assigned_employee_id=employee_id,
                cancellation_token=secrets.token_hex(32),
                created_at=self.clock.now(),
                updated_at=self.clock.now(),
            )
            self.appointments.add(appointment)

            hooks.append(partial(self.notifier.send_booking_received, appointment))
            hooks.append(partial(self.notifier.send_admin_alert, appointment))

        logger.info(
            f"Appointment booked: id={appointment.id}, "
            f"type={appointment.appointment_type}, time={start.isoformat()}, "
            f"employee_id={employee_id}"
        )
        return appointment

    def cancel(self, token: str, reason: Optional[str] = None) -> Appointments:
        """
        Client cancellation through the cancellation token.

        Raises:
            NotFound: unknown token
            AlreadyCancelled: second click on the same link (no changes made)
            InvalidTransition: appointment already completed / no_show
        """
        with self._unit_of_work() as hooks:
            appointment = self._get_by_token(token)
            if appointment.status == AppointmentStatus.CANCELLED:
                raise AlreadyCancelled(appointment)

            appointment.cancel_reason = reason or DEFAULT_CANCEL_REASON
            hooks.extend(
                lifecycle.transition(appointment, AppointmentStatus.CANCELLED, self.notifier)
            )
            appointment.updated_at = self.clock.now()

        logger.info(f"Appointment cancelled by client: id={appointment.id}")
        return appointment

    # ── Administrative operations ───────────────────────────────────────

    def update_status(self, appointment_id: int, new_status: str) -> Appointments:
        target = lifecycle.parse_status(new_status)

        with self._unit_of_work() as hooks:
            appointment = self._get_appointment(appointment_id)
            previous = appointment.status
            hooks.extend(lifecycle.transition(appointment, target, self.notifier))
            appointment.updated_at = self.clock.now()

        logger.info(
            f"Appointment status changed: id={appointment_id}, "
            f"{previous} → {target.value}"
        )
        return appointment

    def request_reschedule(self, appointment_id: int, message: Optional[str] = None) -> Appointments:
        """Ask the client to pick another time (status needs_reschedule)."""
        with self._unit_of_work() as hooks:
            appointment = self._get_appointment(appointment_id)
            hooks.extend(
                lifecycle.transition(
                    appointment,
                    AppointmentStatus.NEEDS_RESCHEDULE,
                    self.notifier,
                    message=message,
                )
            )
            appointment.updated_at = self.clock.now()

        logger.info(f"Reschedule requested: id={appointment_id}")
        return appointment

    def reassign_employee(self, appointment_id: int, employee_id: int) -> Appointments:
        """
        Move an appointment to another employee.

        Raises:
            Conflict: the employee has an overlapping appointment or blocked time
        """
        with self._unit_of_work() as hooks:
            appointment = self._get_appointment(appointment_id)
            employee = self._get_employee(employee_id)
            if not employee.is_active:
                raise ValidationError("employee_id", "Employee is not active")

            if lifecycle.parse_status(appointment.status) in TERMINAL_STATUSES:
                raise ValidationError(
                    "appointment_id",
                    f"Cannot reassign a {appointment.status} appointment",
                )
            if appointment.assigned_employee_id == employee_id:
                return appointment

            start, end = appointment_interval(appointment)
            self.appointments.lock_employee_schedule(employee_id)
            self._ensure_free(employee_id, start, end, exclude_appointment_id=appointment.id)

            appointment.assigned_employee_id = employee_id
            appointment.updated_at = self.clock.now()
            hooks.append(partial(self.notifier.send_employee_assignment, employee, appointment))

        logger.info(f"Appointment {appointment_id} assigned to employee {employee_id}")
        return appointment

    def update_appointment(self, appointment_id: int, changes: Mapping[str, Any]) -> Appointments:
        """
        Edit time, duration, location or notes.

        A new time window is overlap-checked against the assigned employee.
        """
        with self._unit_of_work():
            appointment = self._get_appointment(appointment_id)

            start = appointment.appointment_date
            duration = appointment.duration
            if changes.get("appointment_date") is not None:
                start = self._parse_datetime("appointment_date", changes["appointment_date"])
            if changes.get("duration") is not None:
                duration = self._validate_duration(changes["duration"])

            time_changed = (start, duration) != (appointment.appointment_date, appointment.duration)
            if time_changed:
                if lifecycle.parse_status(appointment.status) in TERMINAL_STATUSES:
                    raise ValidationError(
                        "appointment_date",
                        f"Cannot move a {appointment.status} appointment",
                    )
                end = start + timedelta(minutes=duration)
                if appointment.assigned_employee_id is not None:
                    self.appointments.lock_employee_schedule(appointment.assigned_employee_id)
                    self._ensure_free(
                        appointment.assigned_employee_id,
                        start,
                        end,
                        exclude_appointment_id=appointment.id,
                    )
                appointment.appointment_date = start
                appointment.appointment_end = end
                appointment.duration = duration

            for field in ("location_address", "notes"):
                if field in changes:
                    setattr(appointment, field, changes[field])
            appointment.updated_at = self.clock.now()

        return appointment

    def purge_appointment(self, appointment_id: int) -> None:
        """Physically delete an appointment (explicit administrative purge)."""
        with self._unit_of_work():
            appointment = self._get_appointment(appointment_id)
            self.appointments.delete(appointment)
        logger.info(f"Appointment purged: id={appointment_id}")

    def get_appointment(self, appointment_id: int) -> Appointments:
        return self._get_appointment(appointment_id)

    def get_appointment_by_token(self, token: str) -> Appointments:
        return self._get_by_token(token)

    def list_appointments(
        self,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Appointments]:
        if status and status != "all":
            status = lifecycle.parse_status(status).value
        else:
            status = None
        start = datetime.combine(start_date, time.min) if start_date else None
        end = datetime.combine(end_date, time.min) + timedelta(days=1) if end_date else None
        return self.appointments.list_all(status=status, start=start, end=end)

    def cancellation_url(self, appointment: Appointments) -> str:
        return cancellation_url(appointment.cancellation_token, self.base_url)

    def reschedule_url(self, appointment: Appointments) -> str:
        return reschedule_url(appointment.cancellation_token, self.base_url)

    # ── Availability rules ──────────────────────────────────────────────

    def list_availability(self, employee_id: Optional[int] = None) -> list[EmployeeAvailability]:
        return self.availability.list_all(employee_id)

    def create_availability(
        self,
        employee_id: int,
        day_of_week: int,
        start_time: str,
        end_time: str,
        is_available: bool = True,
    ) -> EmployeeAvailability:
        self._get_employee(employee_id)
        self._validate_rule(day_of_week, start_time, end_time)

        with self._unit_of_work():
            rule = self.availability.add(EmployeeAvailability(
                employee_id=employee_id,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                is_available=is_available,
            ))
        return rule

    def update_availability(self, rule_id: int, changes: Mapping[str, Any]) -> EmployeeAvailability:
        with self._unit_of_work():
            rule = self._get_rule(rule_id)
            merged = {
                "day_of_week": rule.day_of_week,
                "start_time": rule.start_time,
                "end_time": rule.end_time,
                "is_available": rule.is_available,
            }
            merged.update({k: v for k, v in changes.items() if k in merged and v is not None})
            self._validate_rule(merged["day_of_week"], merged["start_time"], merged["end_time"])
            self.availability.update(rule, **merged)
        return rule

    def delete_availability(self, rule_id: int) -> None:
        with self._unit_of_work():
            self.availability.delete(self._get_rule(rule_id))

    # ── Blocked times ───────────────────────────────────────────────────

    def list_blocked_times(
        self,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BlockedTimes]:
        if start_date and end_date:
            start = datetime.combine(start_date, time.min)
            end = datetime.combine(end_date, time.min) + timedelta(days=1)
            return self.blocked.list_between(start, end, employee_id)
        return self.blocked.list_all(employee_id)

    def create_blocked_time(
        self,
        employee_id: int,
        start_datetime: datetime,
        end_datetime: datetime,
        reason: str,
        notes: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> BlockedTimes:
        self._get_employee(employee_id)
        start = self._parse_datetime("start_datetime", start_datetime)
        end = self._parse_datetime("end_datetime", end_datetime)
        self._validate_block(start, end, reason)

        with self._unit_of_work():
            block = self.blocked.add(BlockedTimes(
                employee_id=employee_id,
                start_datetime=start,
                end_datetime=end,
                reason=reason.strip(),
                notes=notes,
                created_by=created_by,
                created_at=self.clock.now(),
            ))
        return block

    def update_blocked_time(self, block_id: int, changes: Mapping[str, Any]) -> BlockedTimes:
        with self._unit_of_work():
            block = self._get_block(block_id)
            start = block.start_datetime
            end = block.end_datetime
            if changes.get("start_datetime") is not None:
                start = self._parse_datetime("start_datetime", changes["start_datetime"])
            if changes.get("end_datetime") is not None:
                end = self._parse_datetime("end_datetime", changes["end_datetime"])
            reason = changes["reason"] if changes.get("reason") is not None else block.reason
            self._validate_block(start, end, reason)

            updates = {"start_datetime": start, "end_datetime": end, "reason": reason.strip()}
            if "notes" in changes:
                updates["notes"] = changes["notes"]
            self.blocked.update(block, **updates)
        return block

    def delete_blocked_time(self, block_id: int) -> None:
        with self._unit_of_work():
            self.blocked.delete(self._get_block(block_id))

    # ── Unit of work ────────────────────────────────────────────────────

    @contextmanager
    def _unit_of_work(self):
        """
        Commit on success, roll back on any error.

        Yields the post-commit hook list; hooks run only after a successful
        commit.
        """
        hooks: list[PostCommitHook] = []
        try:
            yield hooks
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Transaction failed: {e}")
            raise StorageError("Could not persist scheduling change") from e
        except Exception:
            self.db.rollback()
            raise

        self._run_post_commit(hooks)

    def _run_post_commit(self, hooks: list[PostCommitHook]) -> None:
        for hook in hooks:
            name = getattr(getattr(hook, "func", hook), "__name__", repr(hook))
            try:
                if hook() is False:
                    logger.warning(f"Notification {name} was not delivered")
            except Exception:
                logger.exception(f"Notification {name} failed")

    # ── Allocation / overlap ────────────────────────────────────────────

    def _allocate(self, start: datetime, duration: int) -> Optional[int]:
        """
        First allocator candidate that is still free under its write lock.

        A candidate may have been taken by a concurrent booking between the
        slot read and the lock; it is skipped and the next one is tried.
        """
        end = start + timedelta(minutes=duration)
        candidates = self.allocator.candidate_employees(start.date(), start.time(), duration)

        for employee_id in candidates:
            self.appointments.lock_employee_schedule(employee_id)
            if not self._has_conflict(employee_id, start, end):
                return employee_id
            logger.info(f"Employee {employee_id} was taken concurrently at {start.isoformat()}")

        if not candidates:
            logger.info(f"No employee available at {start.isoformat()}, booking stays unassigned")
        return None

    def _has_conflict(
        self,
        employee_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[int] = None,
    ) -> bool:
        if self.appointments.find_conflicts(employee_id, start, end, exclude_appointment_id):
            return True
        return bool(self.blocked.list_between(start, end, employee_id))

    def _ensure_free(
        self,
        employee_id: int,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[int] = None,
    ) -> None:
        if self._has_conflict(employee_id, start, end, exclude_appointment_id):
            raise Conflict(
                f"Employee {employee_id} already has an appointment or blocked time "
                f"between {start.strftime('%Y-%m-%d %H:%M')} and {end.strftime('%H:%M')}"
            )

    def _is_fully_blocked(
        self,
        target_date: date,
        rules: list[EmployeeAvailability],
        blocks: list[BlockedTimes],
    ) -> bool:
        """Every scheduled employee has all of their windows covered by blocks."""
        day_start = datetime.combine(target_date, time.min)

        windows_by_employee: dict[int, list[tuple[datetime, datetime]]] = {}
        for rule in rules:
            windows_by_employee.setdefault(rule.employee_id, []).append((
                day_start + timedelta(minutes=time_str_to_minutes(rule.start_time)),
                day_start + timedelta(minutes=time_str_to_minutes(rule.end_time)),
            ))

        for employee_id, windows in windows_by_employee.items():
            employee_blocks = [
                (b.start_datetime, b.end_datetime) for b in blocks if b.employee_id == employee_id
            ]
            if not all(is_fully_covered(window, employee_blocks) for window in windows):
                return False
        return True

    # ── Lookups ─────────────────────────────────────────────────────────

    def _get_appointment(self, appointment_id: int) -> Appointments:
        appointment = self.appointments.get(appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def _get_by_token(self, token: str) -> Appointments:
        appointment = self.appointments.get_by_token(token) if token else None
        if not appointment:
            raise NotFound("Appointment not found or invalid cancellation link")
        return appointment

    def _get_employee(self, employee_id: int) -> Employees:
        employee = self.employees.get(employee_id)
        if not employee:
            raise NotFound("Employee not found")
        return employee

    def _get_rule(self, rule_id: int) -> EmployeeAvailability:
        rule = self.availability.get(rule_id)
        if not rule:
            raise NotFound("Availability rule not found")
        return rule

    def _get_block(self, block_id: int) -> BlockedTimes:
        block = self.blocked.get(block_id)
        if not block:
            raise NotFound("Blocked time not found")
        return block

    # ── Validation ──────────────────────────────────────────────────────

    def _validate_booking(self, request: Any) -> dict:
        data = request.model_dump() if hasattr(request, "model_dump") else dict(request)

        missing = [
            field for field in REQUIRED_BOOKING_FIELDS
            if data.get(field) is None or (isinstance(data[field], str) and not data[field].strip())
        ]
        if missing:
            raise ValidationError(
                ", ".join(missing),
                f"Missing required fields: {', '.join(missing)}",
            )

        email = str(data["client_email"]).strip()
        if not EMAIL_RE.match(email):
            raise ValidationError("client_email", "Invalid email format")

        appointment_type = str(data["appointment_type"]).strip()
        valid_types = [t.value for t in AppointmentType]
        if appointment_type not in valid_types:
            raise ValidationError(
                "appointment_type",
                f"Invalid appointment_type. Must be one of: {', '.join(valid_types)}",
            )

        return {
            "client_name": str(data["client_name"]).strip(),
            "client_email": email,
            "client_phone": str(data["client_phone"]).strip(),
            "client_language": data.get("client_language") or DEFAULT_LANGUAGE,
            "appointment_type": appointment_type,
            "appointment_date": self._parse_datetime("appointment_date", data["appointment_date"]),
            "duration": self._validate_duration(data.get("duration")),
            "location_address": data.get("location_address") or None,
            "notes": data.get("notes") or None,
        }

    def _validate_duration(self, duration: Optional[int]) -> int:
        if duration is None:
            return settings.default_duration_minutes
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ValidationError("duration", "Duration must be a whole number of minutes")
        if not 0 < duration <= MINUTES_PER_DAY:
            raise ValidationError("duration", "Duration must be between 1 and 1440 minutes")
        return duration

    def _parse_datetime(self, field: str, value: Any) -> datetime:
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                raise ValidationError(field, f"{field} must be an ISO datetime")
        if not isinstance(value, datetime):
            raise ValidationError(field, f"{field} must be an ISO datetime")
        return self.clock.to_business_time(value).replace(microsecond=0)

    @staticmethod
    def _validate_rule(weekday: Any, start_time: str, end_time: str) -> None:
        if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
            raise ValidationError("day_of_week", "day_of_week must be 0 (Sunday) to 6 (Saturday)")
        try:
            start_min = time_str_to_minutes(start_time)
        except ValueError as e:
            raise ValidationError("start_time", str(e))
        try:
            end_min = time_str_to_minutes(end_time)
        except ValueError as e:
            raise ValidationError("end_time", str(e))
        if start_min >= end_min:
            raise ValidationError("end_time", "start_time must be before end_time")

    @staticmethod
    def _validate_block(start: datetime, end: datetime, reason: Optional[str]) -> None:
        if not reason or not reason.strip():
            raise ValidationError("reason", "reason is required")
        if start >= end:
            raise ValidationError("end_datetime", "start_datetime must be before end_datetime")
