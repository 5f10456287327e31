# backend/scheduler/routers/admin_appointments.py
# Authentication is enforced upstream (gateway); these routes trust the caller.

from datetime import date

from fastapi import APIRouter, Depends, status

from ..dependencies import get_scheduling_service
from ..schemas.appointments import (
    AppointmentEmployeeAssign,
    AppointmentRead,
    AppointmentRescheduleRequest,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from ..services.scheduling import SchedulingService

router = APIRouter(prefix="/api/admin/appointments", tags=["admin_appointments"])


@router.get("/", response_model=list[AppointmentRead])
def list_appointments(
    status: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.list_appointments(status, start_date, end_date)


@router.get("/{id}", response_model=AppointmentRead)
def get_appointment(id: int, service: SchedulingService = Depends(get_scheduling_service)):
    return service.get_appointment(id)


@router.patch("/{id}/status", response_model=AppointmentRead)
def update_appointment_status(
    id: int,
    data: AppointmentStatusUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_status(id, data.status)


@router.post("/{id}/request-reschedule", response_model=AppointmentRead)
def request_reschedule(
    id: int,
    data: AppointmentRescheduleRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.request_reschedule(id, data.message)


@router.patch("/{id}/employee", response_model=AppointmentRead)
def assign_employee(
    id: int,
    data: AppointmentEmployeeAssign,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.reassign_employee(id, data.employee_id)


@router.patch("/{id}", response_model=AppointmentRead)
def update_appointment(
    id: int,
    data: AppointmentUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_appointment(id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def purge_appointment(id: int, service: SchedulingService = Depends(get_scheduling_service)):
    service.purge_appointment(id)
