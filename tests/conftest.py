"""
Test fixtures for the career guidance API.

Every test gets its own app wired to a fresh in-memory store and an email
service that records messages instead of sending them.
"""

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from careerguide.core.config import Settings
from careerguide.db import COLLECTIONS, MemoryDocumentStore
from careerguide.main import create_app
from careerguide.services.email_service import EmailService


class OutboxEmailService(EmailService):
    """Records outgoing messages in ``outbox``."""

    def __init__(self, settings):
        super().__init__(settings)
        self.enabled = True
        self.outbox = []

    def _deliver(self, message):
        self.outbox.append(message)

    def subjects(self):
        return [m["Subject"] for m in self.outbox]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        mongodb_uri="",
        seed_sample_data=False,
        smtp_host="",
        frontend_url="http://frontend.test",
        jwt_secret_key="test-secret-key",
    )


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def email_service(settings):
    return OutboxEmailService(settings)


@pytest.fixture
def app(settings, store, email_service):
    return create_app(settings=settings, store=store, email_service=email_service)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def run():
    """Run a store/service coroutine from a synchronous test."""
    return asyncio.run


@pytest.fixture
def register_user(client, store, run):
    """
    Factory fixture: register (and by default verify and log in) a user.

    Returns {"user", "token", "headers", "email", "password"}.
    """
    def _register(role="student", email=None, password="secret123", verify=True, **extra):
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@example.com"
        payload = {"email": email, "password": password, "name": f"Test {role.title()}", "role": role}
        payload.update(extra)
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.json()

        result = {"email": email, "password": password, "user": response.json()["data"]["user"]}
        if not verify:
            return result

        stored = run(store.find_one(COLLECTIONS["users"], {"email": email}))
        client.get("/api/auth/verify-email", params={"token": stored["verificationToken"]})
        login = client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.json()
        token = login.json()["data"]["token"]
        result.update({
            "user": login.json()["data"]["user"],
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        })
        return result
    return _register


@pytest.fixture
def student(register_user):
    return register_user("student")


@pytest.fixture
def company(register_user):
    return register_user("company", companyName="Acme Corp")


@pytest.fixture
def institution(register_user):
    return register_user("institution", institutionName="Test University")


@pytest.fixture
def admin(register_user):
    return register_user("admin")


@pytest.fixture
def create_doc(store, run):
    """Factory fixture: insert a raw document into a collection."""
    def _create(collection, **data):
        return run(store.create(COLLECTIONS[collection], data))
    return _create


@pytest.fixture
def open_course(create_doc):
    """Factory fixture: an open course at ``institution_id``."""
    def _course(institution_id, name="Computer Science", requirements=None, seats=10):
        return create_doc(
            "courses",
            name=name,
            institutionId=institution_id,
            requirements=requirements if requirements is not None else ["Mathematics", "English"],
            minimumGrade="C",
            seats=seats,
            availableSeats=seats,
            status="open",
        )
    return _course
