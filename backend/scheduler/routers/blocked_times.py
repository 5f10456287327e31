# backend/scheduler/routers/blocked_times.py

from datetime import date

from fastapi import APIRouter, Depends, status

from ..dependencies import get_scheduling_service
from ..schemas.blocked_times import (
    BlockedTimeCreate,
    BlockedTimeRead,
    BlockedTimeUpdate,
)
from ..services.scheduling import SchedulingService

router = APIRouter(prefix="/api/admin/blocked-times", tags=["blocked_times"])


@router.get("/", response_model=list[BlockedTimeRead])
def list_blocked_times(
    employee_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.list_blocked_times(employee_id, start_date, end_date)


@router.post("/", response_model=BlockedTimeRead, status_code=status.HTTP_201_CREATED)
def create_blocked_time(
    data: BlockedTimeCreate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_blocked_time(**data.model_dump())


@router.patch("/{id}", response_model=BlockedTimeRead)
def update_blocked_time(
    id: int,
    data: BlockedTimeUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_blocked_time(id, data.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_blocked_time(id: int, service: SchedulingService = Depends(get_scheduling_service)):
    service.delete_blocked_time(id)
