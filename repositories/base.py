from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from core.exceptions import StoreError


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    # Mongo keeps millisecond precision; truncate so stored and returned values match
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


class BaseRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db

    @staticmethod
    def _ensure_object_id(value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        return ObjectId(str(value))

    @staticmethod
    def _store_error(operation: str, collection: str, exc: PyMongoError) -> StoreError:
        logger.exception("store.operation_failed", extra={"operation": operation, "collection": collection})
        return StoreError(f"Database error during {operation} on {collection}: {exc}")

    async def find_many(
        self,
        collection: str,
        query: Dict[str, Any] | None = None,
        *,
        sort: Optional[Sequence[tuple[str, int]]] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self.db[collection].find(query or {})
            if sort:
                cursor = cursor.sort(list(sort))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return [doc async for doc in cursor]
        except PyMongoError as exc:
            raise self._store_error("find", collection, exc) from exc

    async def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return await self.db[collection].find_one(query)
        except PyMongoError as exc:
            raise self._store_error("find_one", collection, exc) from exc

    async def insert_one(self, collection: str, doc: Dict[str, Any], *, with_timestamps: bool = True) -> Dict[str, Any]:
        # Never persist a null _id; MongoDB will auto-generate one
        if doc.get("_id", "__absent__") is None:
            doc = {k: v for k, v in doc.items() if k != "_id"}

        doc = {**doc}
        if with_timestamps:
            now = utcnow()
            doc["created_at"] = now
            doc["updated_at"] = now
        try:
            result = await self.db[collection].insert_one(doc)
        except PyMongoError as exc:
            raise self._store_error("insert", collection, exc) from exc
        doc["_id"] = result.inserted_id
        return doc

    async def update_one(
        self,
        collection: str,
        filter_query: Dict[str, Any],
        update: Dict[str, Any],
        *,
        touch_updated_at: bool = True,
    ) -> Optional[Dict[str, Any]]:
        """Apply ``update`` and return the document as it is after the write."""
        if touch_updated_at:
            update = {**update}
            set_part = update.get("$set", {})
            set_part = {**set_part, "updated_at": utcnow()}
            update["$set"] = set_part
        try:
            return await self.db[collection].find_one_and_update(
                filter_query, update, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as exc:
            raise self._store_error("update", collection, exc) from exc

    async def delete_one(self, collection: str, query: Dict[str, Any]) -> bool:
        try:
            result = await self.db[collection].delete_one(query)
        except PyMongoError as exc:
            raise self._store_error("delete", collection, exc) from exc
        return result.deleted_count > 0

    async def create_index(self, collection: str, keys: Sequence[tuple[str, int]], **kwargs: Any) -> None:
        try:
            await self.db[collection].create_index(list(keys), **kwargs)
        except PyMongoError as exc:
            raise self._store_error("create_index", collection, exc) from exc
