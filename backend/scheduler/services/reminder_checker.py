"""
Appointment reminder checker.

Periodically checks for upcoming appointments and sends one reminder per
appointment through the notifier.

An appointment is due when
    appointment_date - remind_before_minutes <= now < appointment_date
and its status is pending/confirmed.

Runs as an asyncio task in the app lifespan.
Uses synchronous DB and Redis (via asyncio.to_thread).
"""

import asyncio
import logging
from datetime import datetime, timedelta

from redis import Redis

from ..clock import Clock
from ..config import settings
from ..database import SessionLocal
from ..redis_client import redis_client
from .lifecycle import AppointmentStatus
from .notifier import EventNotifier, Notifier
from .repositories import AppointmentRepository

logger = logging.getLogger(__name__)

SENT_KEY_TTL = 86400 * 2  # longer than the widest reminder window in use
REMINDABLE_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)


def sent_key(appointment_id: int) -> str:
    return f"appointment:remind:sent:{appointment_id}"


async def reminder_checker_loop() -> None:
    """Periodic loop; errors of one pass are logged and the loop continues."""
    logger.info("reminder_checker_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(check_upcoming_appointments)
            except asyncio.CancelledError:
                logger.info("reminder_checker_loop cancelled")
                raise
            except Exception:
                logger.exception("reminder_checker_loop error")

            await asyncio.sleep(settings.reminder_check_interval)
    except asyncio.CancelledError:
        pass


def check_upcoming_appointments(
    session_factory=SessionLocal,
    notifier: Notifier | None = None,
    redis: Redis | None = None,
    clock: Clock | None = None,
    remind_before_minutes: int | None = None,
) -> int:
    """
    One reminder pass (synchronous).

    Returns the number of reminders sent.
    """
    remind_before = (
        settings.remind_before_minutes
        if remind_before_minutes is None
        else remind_before_minutes
    )
    if remind_before <= 0:
        return 0

    redis = redis if redis is not None else redis_client
    notifier = notifier or EventNotifier(redis=redis)
    now = (clock or Clock()).now()

    sent = 0
    db = session_factory()
    try:
        appointments = AppointmentRepository(db).list_starting_between(
            now,
            now + timedelta(minutes=remind_before),
            REMINDABLE_STATUSES,
        )
        for appointment in appointments:
            try:
                if _process_single_appointment(appointment, now, notifier, redis):
                    sent += 1
            except Exception:
                logger.exception(
                    f"Error processing appointment {appointment.id} for reminder"
                )
    finally:
        db.close()

    return sent


def _process_single_appointment(
    appointment,
    now: datetime,
    notifier: Notifier,
    redis: Redis,
) -> bool:
    key = sent_key(appointment.id)
    if redis.exists(key):
        return False

    if not notifier.send_reminder(appointment):
        logger.warning(f"Reminder for appointment {appointment.id} was not queued")
        return False
    redis.setex(key, SENT_KEY_TTL, "1")

    minutes_left = int((appointment.appointment_date - now).total_seconds() // 60)
    logger.info(
        f"appointment_reminder sent for appointment={appointment.id} "
        f"(starts at {appointment.appointment_date.strftime('%Y-%m-%d %H:%M')}, "
        f"{minutes_left} min left)"
    )
    return True
