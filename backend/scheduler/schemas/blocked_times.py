# backend/scheduler/schemas/blocked_times.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class BlockedTimeCreate(BaseModel):
    employee_id: int

    start_datetime: datetime
    end_datetime: datetime

    reason: str
    notes: Optional[str] = None
    created_by: Optional[int] = None

    model_config = {"from_attributes": True}


class BlockedTimeUpdate(BaseModel):
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


class BlockedTimeRead(BaseModel):
    id: int

    employee_id: int

    start_datetime: datetime
    end_datetime: datetime

    reason: str
    notes: Optional[str] = None
    created_by: Optional[int] = None

    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
