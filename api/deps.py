from __future__ import annotations

from fastapi import Request

from services.management import AppointmentManagementHandler, ManagementHandler
from services.submissions import SubmissionHandler


# Handlers are built once in main.create_app and kept on app.state


def get_appointment_submissions(request: Request) -> SubmissionHandler:
    return request.app.state.appointment_submissions


def get_appointment_management(request: Request) -> AppointmentManagementHandler:
    return request.app.state.appointment_management


def get_contact_submissions(request: Request) -> SubmissionHandler:
    return request.app.state.contact_submissions


def get_contact_management(request: Request) -> ManagementHandler:
    return request.app.state.contact_management
