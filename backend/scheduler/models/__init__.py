from .generated import (
    Appointments,
    Base,
    BlockedTimes,
    EmployeeAvailability,
    Employees,
    metadata,
)

__all__ = [
    "Appointments",
    "Base",
    "BlockedTimes",
    "EmployeeAvailability",
    "Employees",
    "metadata",
]
