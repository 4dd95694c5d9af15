from __future__ import annotations

from .base import MongoModel, NormalizedEmail, OptionalStr, RequiredStr


class Contact(MongoModel):
    name: RequiredStr
    email: NormalizedEmail
    phone: OptionalStr = None
    subject: RequiredStr
    message: RequiredStr
