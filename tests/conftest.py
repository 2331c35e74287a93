"""
Shared fixtures.

The app reads its settings at import time, so the test database, upload
directory and mail switch are set in the environment before importing it.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="placement-portal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'portal.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["MAIL_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from placement_portal.main import app
from placement_portal.db.schema import drop_db, init_db
from placement_portal.services.notification_service import EmailDeliveryError, get_email_service

ADMIN_EMAIL = "admin@college.edu"
PASSWORD = "secret123"


class RecordingEmailService:
    """Collects outgoing mail; addresses in fail_for raise like a bad SMTP send."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, recipient, subject, body, html=False):
        if recipient in self.fail_for:
            raise EmailDeliveryError(f"Failed to send email to {recipient}: refused")
        self.sent.append({"to": recipient, "subject": subject, "body": body})

    @property
    def recipients(self):
        return [m["to"] for m in self.sent]


@pytest.fixture(autouse=True)
def database():
    drop_db()
    init_db()
    yield


@pytest.fixture
def email_service():
    fake = RecordingEmailService()
    app.dependency_overrides[get_email_service] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_email_service, None)


@pytest.fixture
def client(email_service):
    return TestClient(app)


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_token(client):
    resp = client.post("/api/users/register-admin", json={
        "email": ADMIN_EMAIL, "password": PASSWORD, "name": "Placement Officer"
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["access_token"]


@pytest.fixture
def register_student(client):
    """Factory: register a student account, return (user_id, token)."""

    def _register(email, department="Computer Science", name="Test Student"):
        resp = client.post("/api/users/student-registration", json={
            "email": email, "password": PASSWORD, "department": department, "name": name
        })
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"]["id"], body["access_token"]

    return _register


def profile_payload(**overrides):
    payload = {
        "full_name": "Asha Rao",
        "phone_number": "9876543210",
        "address": "12 Hostel Road",
        "department": "Computer Science",
        "roll_number": "CS21-042",
        "current_year": "4",
        "cgpa": 8.4,
        "backlogs": 0,
        "placement_status": "Not Placed",
        "education_history": [
            {"level": "12th", "institution": "City School", "percentage": "91", "year": "2021"}
        ],
        "skills": ["Python", "SQL"],
        "projects": [{"name": "Portal", "description": "Placement portal", "year": "2024"}],
    }
    payload.update(overrides)
    return payload
