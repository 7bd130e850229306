"""
Shared fixtures: in-memory collaborators and a wired test client.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from auth.base import IdentityVerifier, MailSender, UserStore
from auth.errors import EmailDeliveryError, InvalidInput, UniqueViolation
from auth.jwt import TokenService
from auth.models import ExternalIdentity, MailMessage, UserRecord
from auth.password import PasswordHasher
from auth.service import AuthService
from config.settings import Settings
from main import create_app

SECRET = "test-secret-key-that-is-long-enough-for-hs256"
OTHER_SECRET = "another-secret-key-that-is-long-enough-too"


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self.users: Dict[str, UserRecord] = {}
        self.insert_calls = 0

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    async def insert(self, email: str, password_hash: Optional[str]) -> UserRecord:
        self.insert_calls += 1
        if await self.find_by_email(email) is not None:
            raise UniqueViolation(email)
        user = UserRecord(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self.users[user.id] = user
        return user

    async def update_password(self, user_id: str, password_hash: str) -> int:
        user = self.users.get(user_id)
        if user is None:
            return 0
        user.password_hash = password_hash
        return 1


class FakeIdentityVerifier(IdentityVerifier):
    """Maps known external tokens to emails; anything else is invalid."""

    def __init__(self, tokens: Optional[Dict[str, Optional[str]]] = None, configured: bool = True) -> None:
        self.tokens = tokens or {}
        self.configured = configured

    def is_configured(self) -> bool:
        return self.configured

    async def verify_external_token(self, token_id: str) -> ExternalIdentity:
        if token_id not in self.tokens:
            raise InvalidInput("Invalid Google token")
        return ExternalIdentity(email=self.tokens[token_id])


class FakeMailSender(MailSender):
    def __init__(self, *, configured: bool = True, fail: bool = False) -> None:
        self.sent: List[MailMessage] = []
        self.configured = configured
        self.fail = fail

    def is_configured(self) -> bool:
        return self.configured

    async def send(self, message: MailMessage) -> None:
        if self.fail:
            raise EmailDeliveryError("Failed to send email")
        self.sent.append(message)


@pytest.fixture
def hasher() -> PasswordHasher:
    # minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(SECRET, "1h")


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def mailer() -> FakeMailSender:
    return FakeMailSender()


@pytest.fixture
def verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier({"google-ok": "g@x.com", "google-no-email": None})


@pytest.fixture
def auth_service(store, hasher, tokens, verifier, mailer) -> AuthService:
    return AuthService(
        store=store,
        hasher=hasher,
        tokens=tokens,
        identity_verifier=verifier,
        mailer=mailer,
        frontend_url="http://shop.test/",
    )


@pytest.fixture
def client(auth_service):
    settings = Settings(jwt_secret=SECRET, jwt_expires_in="1h")
    app = create_app(settings, auth_service=auth_service)
    with TestClient(app) as test_client:
        yield test_client
