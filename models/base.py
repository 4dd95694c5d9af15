from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Optional

from bson import ObjectId
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    PlainValidator,
    StringConstraints,
    WithJsonSchema,
)
from pydantic.alias_generators import to_camel


def _validate_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError("Invalid ObjectId")


PyObjectId = Annotated[
    ObjectId,
    PlainValidator(_validate_object_id),
    PlainSerializer(lambda v: str(v), return_type=str, when_used="json"),
    WithJsonSchema({"type": "string", "example": "665f1c2e9b1e8a3d4c5b6a7f"}),
]


def _as_utc(value: Any) -> Any:
    # Mongo hands back naive datetimes that are implicitly UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _as_calendar_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        raw = value.strip()
        if len(raw) > 10:
            try:
                return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
            except ValueError:
                raise ValueError("Invalid date, expected YYYY-MM-DD or an ISO datetime") from None
        return raw
    return value


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


UTCDateTime = Annotated[datetime, BeforeValidator(_as_utc)]
CalendarDate = Annotated[date, BeforeValidator(_as_calendar_date)]
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalStr = Optional[Annotated[str, StringConstraints(strip_whitespace=True)]]
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


def to_bson(value: Any) -> Any:
    """Convert python-mode model output into values BSON can encode."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, dict):
        return {k: to_bson(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_bson(v) for v in value]
    return value


class MongoModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(exclude={"id"})
        if self.id is not None:
            doc["_id"] = self.id
        return to_bson(doc)
