from __future__ import annotations

import logging
from email.message import EmailMessage
from enum import Enum
from typing import List, Optional, Union

from fastapi.concurrency import run_in_threadpool

from core.config import AppSettings
from models.appointment import Appointment
from models.contact import Contact
from . import email_templates as templates
from .mail import SMTPTransport, build_message


logger = logging.getLogger(__name__)


class RecordKind(str, Enum):
    appointment = "appointment"
    contact = "contact"


class NotificationDispatcher:
    """Sends the admin summary and the submitter confirmation for a saved record.

    ``notify`` is the error boundary of the deferred path: it runs after the
    HTTP response has gone out, so nothing it raises could reach the client.
    Every failure is logged and dropped; there is no retry.
    """

    def __init__(
        self,
        transport: SMTPTransport,
        *,
        admin_email: Optional[str],
        from_email: Optional[str],
        business_name: str = "Suraksha Car Care",
    ) -> None:
        self.transport = transport
        self.admin_email = admin_email
        self.from_email = from_email
        self.business_name = business_name

    @classmethod
    def from_settings(cls, transport: SMTPTransport, app_settings: AppSettings) -> "NotificationDispatcher":
        return cls(
            transport,
            admin_email=app_settings.admin_address,
            from_email=app_settings.sender_address,
            business_name=app_settings.smtp_from_name,
        )

    def _message(self, to_email: str, subject: str, body: str, reply_to: Optional[str] = None) -> EmailMessage:
        return build_message(
            from_name=self.business_name,
            from_email=self.from_email,
            to_email=to_email,
            subject=subject,
            body=body,
            reply_to=reply_to,
        )

    def compose(self, record: Union[Appointment, Contact], kind: RecordKind) -> List[EmailMessage]:
        kind = RecordKind(kind)
        if kind is RecordKind.appointment:
            admin_subject = templates.APPOINTMENT_ADMIN_SUBJECT
            admin_body = templates.appointment_admin_body(record)
            customer_subject = templates.APPOINTMENT_CUSTOMER_SUBJECT
            customer_body = templates.appointment_customer_body(record, self.business_name)
        else:
            admin_subject = templates.contact_admin_subject(record)
            admin_body = templates.contact_admin_body(record)
            customer_subject = templates.CONTACT_CUSTOMER_SUBJECT
            customer_body = templates.contact_customer_body(record, self.business_name)

        messages: List[EmailMessage] = []
        if self.admin_email:
            messages.append(self._message(self.admin_email, admin_subject, admin_body, reply_to=record.email))
        else:
            logger.warning("notifications.admin_address_missing", extra={"kind": kind.value})
        messages.append(self._message(record.email, customer_subject, customer_body))
        return messages

    async def notify(self, record: Union[Appointment, Contact], kind: RecordKind) -> None:
        record_id = str(record.id)
        kind_label = getattr(kind, "value", kind)
        try:
            messages = self.compose(record, kind)
        except Exception:
            logger.exception("notifications.compose_failed", extra={"kind": kind_label, "record_id": record_id})
            return

        for message in messages:
            try:
                await run_in_threadpool(self.transport.send, message)
            except Exception:
                logger.exception(
                    "notifications.delivery_failed",
                    extra={"kind": kind_label, "record_id": record_id, "to": message["To"]},
                )
                continue
            logger.info(
                "notifications.delivered",
                extra={"kind": kind_label, "record_id": record_id, "to": message["To"]},
            )
