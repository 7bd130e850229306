"""
GoogleIdentityVerifier — verifies Google Sign-In ID tokens.

The frontend obtains an ID token from Google Identity Services and posts it
as ``tokenId``.  We check its signature, issuer, expiry and audience
(our OAuth client ID) with ``google-auth`` and return the asserted email.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from auth.base import IdentityVerifier
from auth.errors import ConfigurationError, ExternalServiceError, InvalidInput
from auth.models import ExternalIdentity

logger = logging.getLogger(__name__)


class GoogleIdentityVerifier(IdentityVerifier):
    """Verify Google ID tokens issued for ``client_id``."""

    def __init__(self, client_id: str) -> None:
        self.client_id = client_id

    def is_configured(self) -> bool:
        return bool(self.client_id)

    def _verify(self, token_id: str) -> Dict[str, Any]:
        # google-auth is synchronous (fetches Google's certs with requests)
        return id_token.verify_oauth2_token(
            token_id, google_requests.Request(), audience=self.client_id
        )

    async def verify_external_token(self, token_id: str) -> ExternalIdentity:
        if not token_id:
            raise InvalidInput("Token ID is required")
        if not self.client_id:
            raise ConfigurationError("Google Client ID is not set")

        try:
            info = await asyncio.to_thread(self._verify, token_id)
        except google_exceptions.TransportError as exc:
            logger.error("Could not reach Google to verify ID token: %s", type(exc).__name__)
            raise ExternalServiceError("Google token verification unavailable") from exc
        except (ValueError, google_exceptions.GoogleAuthError) as exc:
            logger.info("Google ID token rejected: %s", type(exc).__name__)
            raise InvalidInput("Invalid Google token") from exc

        return ExternalIdentity(
            email=info.get("email"),
            subject=info.get("sub"),
            email_verified=bool(info.get("email_verified", False)),
        )
