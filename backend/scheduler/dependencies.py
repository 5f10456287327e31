# backend/scheduler/dependencies.py

from fastapi import Depends
from sqlalchemy.orm import Session

from .clock import Clock, get_clock
from .database import get_db
from .services.notifier import Notifier, get_notifier
from .services.scheduling import SchedulingService


def get_scheduling_service(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> SchedulingService:
    return SchedulingService(db, notifier, clock)
