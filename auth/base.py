"""
Collaborator interfaces consumed by the auth flows.

Concrete implementations live in ``database.user_store`` (SQLAlchemy),
``connectors.google_identity`` and ``connectors.gmail``.  Tests use
in-memory fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from auth.models import ExternalIdentity, MailMessage, UserRecord


class UserStore(ABC):
    """Persistence for user accounts."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Return the user with exactly this email, or None."""
        ...

    @abstractmethod
    async def insert(self, email: str, password_hash: Optional[str]) -> UserRecord:
        """
        Create a user.

        Raises
        ------
        UniqueViolation
            If a user with ``email`` already exists.
        """
        ...

    @abstractmethod
    async def update_password(self, user_id: str, password_hash: str) -> int:
        """Replace the password hash, returning the number of rows updated."""
        ...


class IdentityVerifier(ABC):
    """Verifies ID tokens issued by an external OAuth provider."""

    @abstractmethod
    async def verify_external_token(self, token_id: str) -> ExternalIdentity:
        """
        Raises
        ------
        InvalidInput
            The token is malformed, expired or issued for another audience.
        ExternalServiceError
            The provider could not be reached.
        """
        ...

    def is_configured(self) -> bool:
        return True


class MailSender(ABC):
    """Outbound email."""

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """Deliver ``message`` or raise ``EmailDeliveryError``."""
        ...

    def is_configured(self) -> bool:
        return True
