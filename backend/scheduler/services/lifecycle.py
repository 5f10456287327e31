"""
Appointment lifecycle.

    pending ──► confirmed ──► completed
       │            │
       ├────────────┼──► cancelled
       ├────────────┼──► no_show
       └────────────┴──► needs_reschedule ──► cancelled

cancelled, completed and no_show are terminal. A client who was asked to
reschedule either cancels or books a new appointment.

Every status change goes through transition(). It mutates the appointment
in the current session and returns the notification hooks that must run
after the surrounding transaction commits.
"""

from enum import Enum
from functools import partial
from typing import Callable, Optional

from ..errors import InvalidTransition, ValidationError

PostCommitHook = Callable[[], object]


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    NEEDS_RESCHEDULE = "needs_reschedule"


_S = AppointmentStatus

TRANSITIONS: dict[AppointmentStatus, tuple[AppointmentStatus, ...]] = {
    _S.PENDING: (_S.CONFIRMED, _S.CANCELLED, _S.NO_SHOW, _S.NEEDS_RESCHEDULE),
    _S.CONFIRMED: (_S.COMPLETED, _S.CANCELLED, _S.NO_SHOW, _S.NEEDS_RESCHEDULE),
    _S.NEEDS_RESCHEDULE: (_S.CANCELLED,),
    _S.CANCELLED: (),
    _S.COMPLETED: (),
    _S.NO_SHOW: (),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)
INITIAL_STATUS = _S.PENDING


def parse_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in AppointmentStatus)
        raise ValidationError("status", f"Invalid status '{value}'. Must be one of: {valid}")


def allowed_targets(current) -> list[str]:
    return [s.value for s in TRANSITIONS[parse_status(current)]]


def can_transition(current, target) -> bool:
    return parse_status(target) in TRANSITIONS[parse_status(current)]


def ensure_transition(current, target) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(
            parse_status(current).value,
            parse_status(target).value,
            allowed_targets(current),
        )


def transition(
    appointment,
    target,
    notifier,
    message: Optional[str] = None,
) -> list[PostCommitHook]:
    """
    Move appointment to target status.

    Raises:
        InvalidTransition: target is not reachable from the current status.

    Returns:
        Notification hooks to run once the change is committed.
    """
    target = parse_status(target)
    ensure_transition(appointment.status, target)
    appointment.status = target.value

    if target == _S.CONFIRMED:
        return [partial(notifier.send_confirmation, appointment)]
    if target == _S.NEEDS_RESCHEDULE:
        appointment.reschedule_message = message
        return [partial(notifier.send_reschedule_request, appointment, message)]
    if target == _S.CANCELLED:
        return [partial(notifier.send_cancellation, appointment)]
    return []
