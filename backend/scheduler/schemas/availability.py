# backend/scheduler/schemas/availability.py

from typing import Optional
from pydantic import BaseModel, Field


class AvailabilityCreate(BaseModel):
    employee_id: int
    day_of_week: int = Field(description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(description="HH:MM")
    end_time: str = Field(description="HH:MM")
    is_available: bool = True

    model_config = {"from_attributes": True}


class AvailabilityUpdate(BaseModel):
    day_of_week: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: Optional[bool] = None


class AvailabilityRead(BaseModel):
    id: int

    employee_id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool

    model_config = {"from_attributes": True}
