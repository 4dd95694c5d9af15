from __future__ import annotations

import pytest
from fastapi import BackgroundTasks

from core.exceptions import RecordValidationError
from repositories.records import AppointmentRepository, ContactRepository
from services.notifications import NotificationDispatcher, RecordKind
from services.submissions import SubmissionHandler

from conftest import ADMIN_EMAIL, SENDER_EMAIL


pytestmark = pytest.mark.asyncio


@pytest.fixture
def dispatcher(transport) -> NotificationDispatcher:
    return NotificationDispatcher(transport, admin_email=ADMIN_EMAIL, from_email=SENDER_EMAIL)


async def test_submit_persists_then_defers_notification(mongo_db, dispatcher, transport, appointment_payload):
    handler = SubmissionHandler(AppointmentRepository(mongo_db), dispatcher, RecordKind.appointment)
    tasks = BackgroundTasks()

    record = await handler.submit(appointment_payload, tasks)

    assert await mongo_db["appointments"].count_documents({"_id": record.id}) == 1
    assert len(tasks.tasks) == 1
    assert transport.sent == []

    await tasks()

    assert [m["To"] for m in transport.sent] == [ADMIN_EMAIL, "a@x.com"]


async def test_invalid_submission_queues_nothing(mongo_db, dispatcher, transport, contact_payload):
    handler = SubmissionHandler(ContactRepository(mongo_db), dispatcher, RecordKind.contact)
    tasks = BackgroundTasks()
    payload = dict(contact_payload)
    del payload["subject"]

    with pytest.raises(RecordValidationError):
        await handler.submit(payload, tasks)

    assert tasks.tasks == []
    assert await mongo_db["contacts"].count_documents({}) == 0
    assert transport.sent == []
