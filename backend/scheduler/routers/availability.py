# backend/scheduler/routers/availability.py

from fastapi import APIRouter, Depends, status

from ..dependencies import get_scheduling_service
from ..schemas.availability import (
    AvailabilityCreate,
    AvailabilityRead,
    AvailabilityUpdate,
)
from ..services.scheduling import SchedulingService

router = APIRouter(prefix="/api/admin/employee-availability", tags=["availability"])


@router.get("/", response_model=list[AvailabilityRead])
def list_availability(
    employee_id: int | None = None,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.list_availability(employee_id)


@router.post("/", response_model=AvailabilityRead, status_code=status.HTTP_201_CREATED)
def create_availability(
    data: AvailabilityCreate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_availability(**data.model_dump())


@router.patch("/{id}", response_model=AvailabilityRead)
def update_availability(
    id: int,
    data: AvailabilityUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_availability(id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(id: int, service: SchedulingService = Depends(get_scheduling_service)):
    service.delete_availability(id)
