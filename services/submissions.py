from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import BackgroundTasks

from models.base import MongoModel
from repositories.records import RecordRepository
from services.notifications import NotificationDispatcher, RecordKind


logger = logging.getLogger(__name__)


class SubmissionHandler:
    """Public submission path: persist the record, then schedule its notifications.

    The caller's response never waits on mail delivery. The notification is
    queued on ``BackgroundTasks`` and only starts once the response is sent.
    """

    def __init__(self, repository: RecordRepository, dispatcher: NotificationDispatcher, kind: RecordKind) -> None:
        self.repository = repository
        self.dispatcher = dispatcher
        self.kind = RecordKind(kind)

    async def submit(self, payload: Mapping[str, Any], tasks: BackgroundTasks) -> MongoModel:
        record = await self.repository.create(payload)
        tasks.add_task(self.dispatcher.notify, record, self.kind)
        logger.info(
            "submissions.accepted",
            extra={"kind": self.kind.value, "record_id": str(record.id)},
        )
        return record
