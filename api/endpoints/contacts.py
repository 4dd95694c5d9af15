from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, status

from api.deps import get_contact_management, get_contact_submissions
from models.contact import Contact
from schemas.public import ContactSubmissionResponse, ErrorResponse, MessageResponse
from services.management import ManagementHandler
from services.submissions import SubmissionHandler


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/contact", tags=["contact"], responses={500: {"model": ErrorResponse}})


@router.get("", response_model=List[Contact])
async def list_contacts(handler: ManagementHandler = Depends(get_contact_management)) -> List[Contact]:
    return await handler.list()


@router.get("/{contact_id}", response_model=Contact, responses={404: {"model": ErrorResponse}})
async def get_contact(contact_id: str, handler: ManagementHandler = Depends(get_contact_management)) -> Contact:
    return await handler.get(contact_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ContactSubmissionResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_contact(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    notify: bool = Query(True, description="Send admin and customer emails after submission"),
    submissions: SubmissionHandler = Depends(get_contact_submissions),
    handler: ManagementHandler = Depends(get_contact_management),
) -> ContactSubmissionResponse:
    if notify:
        contact = await submissions.submit(payload, background_tasks)
    else:
        contact = await handler.create(payload)
    logger.info("contacts.created", extra={"contact_id": str(contact.id), "notify": notify})
    return ContactSubmissionResponse(message="Message sent successfully", contact=contact)


@router.put(
    "/{contact_id}",
    response_model=Contact,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_contact(
    contact_id: str,
    patch: Dict[str, Any] = Body(...),
    handler: ManagementHandler = Depends(get_contact_management),
) -> Contact:
    return await handler.update(contact_id, patch)


@router.delete("/{contact_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def delete_contact(contact_id: str, handler: ManagementHandler = Depends(get_contact_management)) -> MessageResponse:
    await handler.delete(contact_id)
    logger.info("contacts.deleted", extra={"contact_id": contact_id})
    return MessageResponse(message="Contact message deleted successfully")
