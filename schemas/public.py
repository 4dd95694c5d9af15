from __future__ import annotations

from typing import List

from pydantic import BaseModel

from models.appointment import Appointment
from models.contact import Contact


class AppointmentSubmissionResponse(BaseModel):
    message: str
    appointment: Appointment


class ContactSubmissionResponse(BaseModel):
    message: str
    contact: Contact


class MessageResponse(BaseModel):
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    message: str
    errors: List[FieldError] = []
