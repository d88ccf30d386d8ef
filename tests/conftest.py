"""
Test configuration and fixtures for the HD Notes API.

The environment is configured before anything from hdnotes is imported:
a throwaway SQLite file database, a cheap bcrypt cost and no log files.
The OTP mailer is replaced by a fake that records every code it is asked
to send, so tests can read codes the way a user reads their inbox.
"""

import asyncio
import os
import tempfile
from typing import Generator, List, Optional, Tuple

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["ENVIRONMENT"] = "test"
os.environ["OTP_HASH_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["LOG_DIR"] = ""
os.environ["AUTO_CREATE_TABLES"] = "true"

import pytest
from fastapi.testclient import TestClient

from hdnotes.features.auth.dependencies.auth import get_otp_mailer
from hdnotes.features.auth.schemas.otp import OTPPurpose
from hdnotes.platform.db.session import drop_models, init_models


class CapturingMailer:
    """Stands in for OTPMailer; keeps every dispatched code."""

    def __init__(self):
        self.sent: List[Tuple[str, str, OTPPurpose]] = []
        self.fail_with: Optional[Exception] = None

    async def send_otp(self, email: str, otp: str, purpose: OTPPurpose) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((email, otp, purpose))

    def last_code_for(self, email: str) -> str:
        for sent_to, otp, _ in reversed(self.sent):
            if sent_to == email:
                return otp
        raise AssertionError(f"no code was sent to {email}")


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from hdnotes.main import app

    return app


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    asyncio.run(drop_models())
    asyncio.run(init_models())
    yield


@pytest.fixture
def mailer(test_app) -> Generator[CapturingMailer, None, None]:
    fake = CapturingMailer()
    test_app.dependency_overrides[get_otp_mailer] = lambda: fake
    yield fake
    test_app.dependency_overrides.pop(get_otp_mailer, None)


@pytest.fixture
def client(test_app, mailer) -> Generator[TestClient, None, None]:
    """
    A clean TestClient for each test function, with the capturing mailer installed.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
def register_and_verify(client, mailer):
    """Register + verify an account and return (token, user_json)."""

    def _register(email: str, name: str = "Test User"):
        response = client.post("/api/auth/register", json={"email": email, "name": name})
        assert response.status_code == 201, response.json()
        otp = mailer.last_code_for(email.strip().lower())
        response = client.post("/api/auth/verify-otp", json={"email": email, "otp": otp})
        assert response.status_code == 200, response.json()
        data = response.json()
        return data["token"], data["user"]

    return _register
