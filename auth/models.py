"""Plain data types the auth core exchanges with its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from auth.jwt import TokenClaims


@dataclass
class UserRecord:
    id: str
    email: str
    password_hash: Optional[str]
    created_at: Optional[datetime] = None

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)


@dataclass
class ExternalIdentity:
    """Identity asserted by an external provider (Google)."""

    email: Optional[str]
    subject: Optional[str] = None
    email_verified: bool = False


@dataclass
class MailMessage:
    to: str
    subject: str
    body: str


@dataclass
class AuthIdentity:
    """What the auth gate attaches to an authenticated request."""

    user_id: str
    claims: TokenClaims
