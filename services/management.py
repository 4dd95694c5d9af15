from __future__ import annotations

from typing import Any, List, Mapping

from core.exceptions import RecordValidationError
from models.appointment import Appointment, AppointmentStatus
from models.base import MongoModel
from repositories.records import AppointmentRepository, RecordRepository


class ManagementHandler:
    """Administrative CRUD over one record kind. Never sends mail."""

    def __init__(self, repository: RecordRepository) -> None:
        self.repository = repository

    async def list(self) -> List[MongoModel]:
        return await self.repository.list()

    async def get(self, record_id: str) -> MongoModel:
        return await self.repository.get(record_id)

    async def create(self, payload: Mapping[str, Any]) -> MongoModel:
        return await self.repository.create(payload)

    async def update(self, record_id: str, patch: Mapping[str, Any]) -> MongoModel:
        return await self.repository.update(record_id, patch)

    async def delete(self, record_id: str) -> None:
        await self.repository.delete(record_id)


class AppointmentManagementHandler(ManagementHandler):
    repository: AppointmentRepository

    async def list_by_status(self, status: str) -> List[Appointment]:
        try:
            wanted = AppointmentStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in AppointmentStatus)
            raise RecordValidationError(
                f"Invalid status '{status}'",
                [{"field": "status", "message": f"Must be one of: {allowed}"}],
            ) from None
        return await self.repository.list_by_status(wanted)
