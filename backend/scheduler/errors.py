"""
Scheduling error kinds.

Only StorageError is worth retrying on the caller side; everything else is
a definitive answer about the request.
"""


class SchedulingError(Exception):
    """Base class for engine errors."""

    code = "scheduling_error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(SchedulingError):
    """Malformed or missing input field."""

    code = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field}


class NotFound(SchedulingError):
    code = "not_found"


class InvalidTransition(SchedulingError):
    """Status change not present in the transition table."""

    code = "invalid_transition"

    def __init__(self, current: str, target: str, allowed: list[str]):
        allowed_str = ", ".join(allowed) if allowed else "none"
        super().__init__(
            f"Cannot change status from '{current}' to '{target}' "
            f"(allowed: {allowed_str})"
        )
        self.current = current
        self.target = target
        self.allowed = allowed

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "current": self.current,
            "target": self.target,
            "allowed": self.allowed,
        }


class Conflict(SchedulingError):
    """Time window already taken; callers should re-fetch available slots."""

    code = "conflict"


class AlreadyCancelled(SchedulingError):
    code = "already_cancelled"

    def __init__(self, appointment):
        super().__init__("Appointment is already cancelled")
        self.appointment = appointment


class StorageError(SchedulingError):
    code = "storage_error"
    retryable = True
