from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import CalendarDate, MongoModel, NormalizedEmail, OptionalStr, RequiredStr


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


class Appointment(MongoModel):
    name: RequiredStr
    email: NormalizedEmail
    phone: RequiredStr
    service: RequiredStr
    date: CalendarDate
    time: RequiredStr
    address: RequiredStr
    car_model: RequiredStr
    message: OptionalStr = None
    status: AppointmentStatus = AppointmentStatus.pending
    assigned_technician: OptionalStr = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    actual_cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
