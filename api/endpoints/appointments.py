from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, status

from api.deps import get_appointment_management, get_appointment_submissions
from models.appointment import Appointment
from schemas.public import AppointmentSubmissionResponse, ErrorResponse, MessageResponse
from services.management import AppointmentManagementHandler
from services.submissions import SubmissionHandler


logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("", response_model=List[Appointment])
async def list_appointments(
    handler: AppointmentManagementHandler = Depends(get_appointment_management),
) -> List[Appointment]:
    return await handler.list()


@router.get("/status/{appointment_status}", response_model=List[Appointment], responses={400: {"model": ErrorResponse}})
async def list_appointments_by_status(
    appointment_status: str,
    handler: AppointmentManagementHandler = Depends(get_appointment_management),
) -> List[Appointment]:
    return await handler.list_by_status(appointment_status)


@router.get("/{appointment_id}", response_model=Appointment, responses={404: {"model": ErrorResponse}})
async def get_appointment(
    appointment_id: str,
    handler: AppointmentManagementHandler = Depends(get_appointment_management),
) -> Appointment:
    return await handler.get(appointment_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=AppointmentSubmissionResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_appointment(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    notify: bool = Query(True, description="Send admin and customer emails after booking"),
    submissions: SubmissionHandler = Depends(get_appointment_submissions),
    handler: AppointmentManagementHandler = Depends(get_appointment_management),
) -> AppointmentSubmissionResponse:
    if notify:
        appointment = await submissions.submit(payload, background_tasks)
    else:
        appointment = await handler.create(payload)
    logger.info("appointments.created", extra={"appointment_id": str(appointment.id), "notify": notify})
    return AppointmentSubmissionResponse(message="Appointment booked successfully", appointment=appointment)


@router.put(
    "/{appointment_id}",
    response_model=Appointment,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_appointment(
    appointment_id: str,
    patch: Dict[str, Any] = Body(...),
    handler: AppointmentManagementHandler = Depends(get_appointment_management),
) -> Appointment:
    appointment = await handler.update(appointment_id, patch)
    logger.info("appointments.updated", extra={"appointment_id": appointment_id, "status": appointment.status.value})
    return appointment


@router.delete("/{appointment_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def delete_appointment(
    appointment_id: str,
    handler: AppointmentManagementHandler = Depends(get_appointment_management),
) -> MessageResponse:
    await handler.delete(appointment_id)
    logger.info("appointments.deleted", extra={"appointment_id": appointment_id})
    return MessageResponse(message="Appointment deleted successfully")
