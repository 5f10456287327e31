# backend/scheduler/schemas/appointments.py

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class AppointmentType(str, Enum):
    CONSULTATION = "consultation"
    MEASUREMENT = "measurement"
    ESTIMATE = "estimate"
    FOLLOWUP = "followup"


class AppointmentBook(BaseModel):
    """
    Public booking request.

    Fields are loosely typed; the scheduling service validates them and
    raises ValidationError naming the offending field.
    """
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_language: Optional[str] = None
    appointment_type: Optional[str] = None
    appointment_date: Optional[str] = Field(None, description="ISO datetime, business timezone if naive")
    duration: Optional[int] = Field(None, description="Minutes, defaults to 60")
    location_address: Optional[str] = None
    notes: Optional[str] = None


class AppointmentRead(BaseModel):
    id: int

    client_name: str
    client_email: str
    client_phone: str
    client_language: str

    appointment_type: str
    appointment_date: datetime
    duration: int
    status: str

    location_address: Optional[str] = None
    notes: Optional[str] = None
    assigned_employee_id: Optional[int] = None
    cancel_reason: Optional[str] = None
    reschedule_message: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AppointmentBooked(BaseModel):
    success: bool = True
    message: str = "Appointment booked successfully"
    appointment_id: int
    appointment: AppointmentRead
    cancellation_token: str
    cancellation_url: str


class AppointmentPublicDetails(BaseModel):
    """What the cancel/reschedule page may show (no contact data)."""
    id: int
    client_name: str
    appointment_type: str
    appointment_date: datetime
    duration: int
    status: str
    location_address: Optional[str] = None

    model_config = {"from_attributes": True}


class AppointmentCancel(BaseModel):
    reason: Optional[str] = None


class AppointmentCancelResult(BaseModel):
    success: bool = True
    message: str
    already_cancelled: bool = False


class AppointmentStatusUpdate(BaseModel):
    status: str


class AppointmentRescheduleRequest(BaseModel):
    message: Optional[str] = None


class AppointmentEmployeeAssign(BaseModel):
    employee_id: int


class AppointmentUpdate(BaseModel):
    appointment_date: Optional[datetime] = None
    duration: Optional[int] = None
    location_address: Optional[str] = None
    notes: Optional[str] = None


class AvailableSlot(BaseModel):
    time: datetime
    employee_id: int
    employee_name: Optional[str] = None


class AvailableSlotsResponse(BaseModel):
    date: date
    duration: int
    available_slots: list[AvailableSlot]


class AvailableDatesResponse(BaseModel):
    year: int
    month: int
    dates: list[date]
