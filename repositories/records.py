from __future__ import annotations

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError

from core.exceptions import RecordNotFoundError, RecordValidationError
from models.appointment import Appointment, AppointmentStatus
from models.base import MongoModel, to_bson
from models.contact import Contact

from .base import BaseRepository


logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=MongoModel)

# System-managed keys a client may never overwrite
_PROTECTED_FIELDS = {"id", "created_at", "updated_at"}
NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


class RecordRepository(BaseRepository, Generic[RecordT]):
    """Keyed storage for one record kind, validating every write against ``model``."""

    collection: str
    model: Type[RecordT]
    label: str

    def _not_found(self) -> RecordNotFoundError:
        return RecordNotFoundError(f"{self.label} not found")

    def _parse_id(self, record_id: Any) -> ObjectId:
        try:
            return self._ensure_object_id(record_id)
        except (InvalidId, TypeError):
            raise self._not_found() from None

    def _validate(self, data: Mapping[str, Any]) -> RecordT:
        try:
            return self.model.model_validate(data)
        except ValidationError as exc:
            raise RecordValidationError.from_pydantic(f"Invalid {self.label.lower()} data", exc) from exc

    def _from_document(self, doc: Dict[str, Any]) -> RecordT:
        return self.model.model_validate(doc)

    def _alias_map(self) -> Dict[str, str]:
        aliases: Dict[str, str] = {}
        for name, field in self.model.model_fields.items():
            alias = field.alias or name
            aliases[name] = alias
            aliases[alias] = alias
        return aliases

    async def ensure_indexes(self) -> None:
        await self.create_index(self.collection, [("created_at", -1)])

    async def list(self, query: Optional[Dict[str, Any]] = None) -> List[RecordT]:
        docs = await self.find_many(self.collection, query or {}, sort=NEWEST_FIRST)
        return [self._from_document(doc) for doc in docs]

    async def get(self, record_id: Any) -> RecordT:
        doc = await self.find_one(self.collection, {"_id": self._parse_id(record_id)})
        if doc is None:
            raise self._not_found()
        return self._from_document(doc)

    async def create(self, payload: Mapping[str, Any]) -> RecordT:
        if not isinstance(payload, Mapping):
            raise RecordValidationError(f"Invalid {self.label.lower()} data: expected a JSON object")
        aliases = self._alias_map()
        protected = {aliases[name] for name in _PROTECTED_FIELDS}
        record = self._validate({k: v for k, v in payload.items() if aliases.get(k) not in protected})
        doc = record.to_document()
        doc.pop("_id", None)
        stored = await self.insert_one(self.collection, doc)
        created = self._from_document(stored)
        logger.info("records.created", extra={"collection": self.collection, "record_id": str(created.id)})
        return created

    async def update(self, record_id: Any, patch: Mapping[str, Any]) -> RecordT:
        if not isinstance(patch, Mapping):
            raise RecordValidationError(f"Invalid {self.label.lower()} data: expected a JSON object")
        object_id = self._parse_id(record_id)
        current = await self.get(object_id)

        aliases = self._alias_map()
        protected = {aliases[name] for name in _PROTECTED_FIELDS}
        changes = {aliases[k]: v for k, v in patch.items() if k in aliases and aliases[k] not in protected}

        # Re-validate the whole record so partial patches still honour every field rule
        merged = self._validate({**current.model_dump(by_alias=True), **changes})
        touched = {name for name, field in self.model.model_fields.items() if (field.alias or name) in changes}
        set_part = to_bson(merged.model_dump(include=touched))

        doc = await self.update_one(self.collection, {"_id": object_id}, {"$set": set_part})
        if doc is None:
            raise self._not_found()
        logger.info(
            "records.updated",
            extra={"collection": self.collection, "record_id": str(object_id), "fields": sorted(touched)},
        )
        return self._from_document(doc)

    async def delete(self, record_id: Any) -> None:
        object_id = self._parse_id(record_id)
        if not await self.delete_one(self.collection, {"_id": object_id}):
            raise self._not_found()
        logger.info("records.deleted", extra={"collection": self.collection, "record_id": str(object_id)})


class AppointmentRepository(RecordRepository[Appointment]):
    collection = "appointments"
    model = Appointment
    label = "Appointment"

    async def ensure_indexes(self) -> None:
        await super().ensure_indexes()
        await self.create_index(self.collection, [("status", 1), ("created_at", -1)])

    async def list_by_status(self, status: AppointmentStatus) -> List[Appointment]:
        return await self.list({"status": AppointmentStatus(status).value})


class ContactRepository(RecordRepository[Contact]):
    collection = "contacts"
    model = Contact
    label = "Contact message"
