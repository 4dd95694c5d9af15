# tests/conftest.py
import os
import sys
from email.message import EmailMessage
from pathlib import Path
from typing import List

# Make the flat top-level packages (api, core, models, ...) importable
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# Must be set before core.config is imported anywhere
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from core.config import AppSettings
from core.exceptions import TransportError
from main import create_app


ADMIN_EMAIL = "owner@surakshacarcare.com"
SENDER_EMAIL = "bookings@surakshacarcare.com"


class RecordingTransport:
    """Stands in for SMTPTransport and keeps every message it is handed."""

    def __init__(self) -> None:
        self.sent: List[EmailMessage] = []
        self.closed = False

    def send(self, message: EmailMessage) -> None:
        self.sent.append(message)

    def close(self) -> None:
        self.closed = True


class FailingTransport(RecordingTransport):
    def send(self, message: EmailMessage) -> None:
        raise TransportError(f"SMTP delivery to {message['To']} failed: connection refused")


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        ADMIN_EMAIL=ADMIN_EMAIL,
        SMTP_FROM_EMAIL=SENDER_EMAIL,
        MONGO_DB_NAME="carcare-test",
        ENVIRONMENT="test",
    )


@pytest.fixture
def mongo_db():
    client = AsyncMongoMockClient()
    return client["carcare-test"]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def client(app_settings, mongo_db, transport):
    app = create_app(app_settings, database=mongo_db, transport=transport)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def appointment_payload() -> dict:
    return {
        "name": "A",
        "email": "a@x.com",
        "phone": "123",
        "service": "oil-change",
        "date": "2024-05-01",
        "time": "10:00",
        "address": "Street 1",
        "carModel": "Civic",
    }


@pytest.fixture
def contact_payload() -> dict:
    return {
        "name": "Ravi Kumar",
        "email": "  Ravi.Kumar@Gmail.com ",
        "phone": "9876543210",
        "subject": "Ceramic coating quote",
        "message": "How much for a hatchback?",
    }
