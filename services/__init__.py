from __future__ import annotations

# Re-export key service classes for convenient imports
from .mail import SMTPTransport
from .management import AppointmentManagementHandler, ManagementHandler
from .notifications import NotificationDispatcher, RecordKind
from .submissions import SubmissionHandler

__all__ = [
    "AppointmentManagementHandler",
    "ManagementHandler",
    "NotificationDispatcher",
    "RecordKind",
    "SMTPTransport",
    "SubmissionHandler",
]
