"""
Notifier: outbound client/staff/employee notifications.

The engine only decides *that* a notification is due. Delivery (email,
SMS) happens in external workers fed through the Redis event queue.
Every method returns True/False and never raises into the engine.
"""

import logging

from redis import Redis

from ..config import settings
from .events import emit_event

logger = logging.getLogger(__name__)


def cancellation_url(token: str, base_url: str | None = None) -> str:
    base = (base_url or settings.public_base_url).rstrip("/")
    return f"{base}/appointment/cancel/{token}"


def reschedule_url(token: str, base_url: str | None = None) -> str:
    base = (base_url or settings.public_base_url).rstrip("/")
    return f"{base}/appointment/reschedule/{token}"


class Notifier:
    """Interface used by the scheduling service."""

    def send_booking_received(self, appointment) -> bool:
        raise NotImplementedError

    def send_admin_alert(self, appointment) -> bool:
        raise NotImplementedError

    def send_confirmation(self, appointment) -> bool:
        raise NotImplementedError

    def send_cancellation(self, appointment) -> bool:
        raise NotImplementedError

    def send_reschedule_request(self, appointment, message: str | None) -> bool:
        raise NotImplementedError

    def send_employee_assignment(self, employee, appointment) -> bool:
        raise NotImplementedError

    def send_reminder(self, appointment) -> bool:
        raise NotImplementedError


class EventNotifier(Notifier):
    """Queues one event per notification on events:p2p."""

    def __init__(self, redis: Redis | None = None, base_url: str | None = None):
        self.redis = redis
        self.base_url = base_url

    def send_booking_received(self, appointment) -> bool:
        return self._emit("appointment_booked", appointment)

    def send_admin_alert(self, appointment) -> bool:
        return self._emit("appointment_admin_alert", appointment, recipient="staff")

    def send_confirmation(self, appointment) -> bool:
        return self._emit("appointment_confirmed", appointment)

    def send_cancellation(self, appointment) -> bool:
        return self._emit(
            "appointment_cancelled",
            appointment,
            cancel_reason=appointment.cancel_reason,
        )

    def send_reschedule_request(self, appointment, message: str | None) -> bool:
        return self._emit(
            "appointment_reschedule_requested",
            appointment,
            message=message or "",
            reschedule_url=reschedule_url(appointment.cancellation_token, self.base_url),
        )

    def send_employee_assignment(self, employee, appointment) -> bool:
        return self._emit(
            "appointment_employee_assigned",
            appointment,
            recipient="employee",
            employee={"id": employee.id, "name": employee.name, "phone": employee.phone},
        )

    def send_reminder(self, appointment) -> bool:
        return self._emit("appointment_reminder", appointment)

    def _emit(self, event_type: str, appointment, recipient: str = "client", **extra) -> bool:
        payload = {
            "recipient": recipient,
            "appointment": _appointment_payload(appointment),
            "cancellation_url": cancellation_url(appointment.cancellation_token, self.base_url),
            **extra,
        }
        return emit_event(event_type, payload, redis=self.redis)


def _appointment_payload(appointment) -> dict:
    return {
        "id": appointment.id,
        "client_name": appointment.client_name,
        "client_email": appointment.client_email,
        "client_phone": appointment.client_phone,
        "client_language": appointment.client_language,
        "appointment_type": appointment.appointment_type,
        "appointment_date": appointment.appointment_date.isoformat(),
        "duration": appointment.duration,
        "status": appointment.status,
        "location_address": appointment.location_address,
        "assigned_employee_id": appointment.assigned_employee_id,
    }


def get_notifier() -> Notifier:
    """FastAPI dependency."""
    return EventNotifier()
