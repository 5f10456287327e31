# backend/scheduler/routers/appointments.py
"""
Public appointment endpoints.

GET  /available-dates    - month calendar of bookable days
GET  /available-slots    - bookable times for one day
POST /book               - create an appointment (employee is auto-assigned)
POST /cancel/{token}     - client cancellation link (idempotent)
GET  /details/{token}    - limited view for the cancel/reschedule page
"""

from datetime import date

from fastapi import APIRouter, Depends, status

from ..config import settings
from ..dependencies import get_scheduling_service
from ..errors import AlreadyCancelled
from ..schemas.appointments import (
    AppointmentBook,
    AppointmentBooked,
    AppointmentCancel,
    AppointmentCancelResult,
    AppointmentPublicDetails,
    AppointmentRead,
    AvailableDatesResponse,
    AvailableSlot,
    AvailableSlotsResponse,
)
from ..services.scheduling import SchedulingService

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.get("/available-dates", response_model=AvailableDatesResponse)
def get_available_dates(
    year: int,
    month: int,
    service: SchedulingService = Depends(get_scheduling_service),
):
    dates = service.list_available_dates(year, month)
    return AvailableDatesResponse(year=year, month=month, dates=sorted(dates))


@router.get("/available-slots", response_model=AvailableSlotsResponse)
def get_available_slots(
    date: date,
    duration: int | None = None,
    service: SchedulingService = Depends(get_scheduling_service),
):
    slots = service.list_available_slots(date, duration)
    return AvailableSlotsResponse(
        date=date,
        duration=duration or settings.default_duration_minutes,
        available_slots=[AvailableSlot(**slot) for slot in slots],
    )


@router.post("/book", response_model=AppointmentBooked, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: AppointmentBook,
    service: SchedulingService = Depends(get_scheduling_service),
):
    appointment = service.book(data)
    return AppointmentBooked(
        appointment_id=appointment.id,
        appointment=AppointmentRead.model_validate(appointment),
        cancellation_token=appointment.cancellation_token,
        cancellation_url=service.cancellation_url(appointment),
    )


@router.post("/cancel/{token}", response_model=AppointmentCancelResult)
def cancel_appointment(
    token: str,
    data: AppointmentCancel | None = None,
    service: SchedulingService = Depends(get_scheduling_service),
):
    reason = data.reason if data else None
    try:
        service.cancel(token, reason)
    except AlreadyCancelled:
        return AppointmentCancelResult(
            message="Appointment was already cancelled",
            already_cancelled=True,
        )
    return AppointmentCancelResult(message="Appointment cancelled successfully")


@router.get("/details/{token}", response_model=AppointmentPublicDetails)
def get_appointment_details(
    token: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.get_appointment_by_token(token)
