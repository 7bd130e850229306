"""
GmailSender — sends application email (password reset links) through the
Gmail API as a single configured sender account.

The sender authorises once with the ``gmail.send`` scope; its offline
refresh token plus our OAuth client credentials let ``google-auth`` mint
access tokens on demand.  All sync ``googleapiclient`` calls are offloaded
to a thread via ``asyncio.to_thread()`` so they never block the event loop.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from email.mime.text import MIMEText
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from auth.base import MailSender
from auth.errors import ConfigurationError, EmailDeliveryError
from auth.models import MailMessage

logger = logging.getLogger(__name__)

_GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
_GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"


def encode_message(sender: str, message: MailMessage) -> str:
    """Build a plain-text MIME message and return it as Gmail's ``raw`` field."""
    mime = MIMEText(message.body, "plain")
    mime["to"] = message.to
    mime["from"] = sender
    mime["subject"] = message.subject
    return base64.urlsafe_b64encode(mime.as_bytes()).decode()


class GmailSender(MailSender):
    """Mail sender backed by the Gmail API."""

    def __init__(
        self,
        *,
        sender_email: str,
        refresh_token: str,
        client_id: str,
        client_secret: str,
    ) -> None:
        self.sender_email = sender_email
        self._refresh_token = refresh_token
        self._client_id = client_id
        self._client_secret = client_secret

    def is_configured(self) -> bool:
        return bool(
            self.sender_email
            and self._refresh_token
            and self._client_id
            and self._client_secret
        )

    def _build_service(self) -> Any:
        creds = Credentials(
            token=None,
            refresh_token=self._refresh_token,
            client_id=self._client_id,
            client_secret=self._client_secret,
            token_uri=_GOOGLE_TOKEN_URL,
            scopes=[_GMAIL_SEND_SCOPE],
        )
        return build("gmail", "v1", credentials=creds, cache_discovery=False)

    async def send(self, message: MailMessage) -> None:
        if not self.is_configured():
            raise ConfigurationError("Email credentials are not set")

        raw = encode_message(self.sender_email, message)
        try:
            service = await asyncio.to_thread(self._build_service)
            await asyncio.to_thread(
                service.users()
                .messages()
                .send(userId="me", body={"raw": raw})
                .execute
            )
        except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            logger.error("Gmail send failed: %s", type(exc).__name__)
            raise EmailDeliveryError("Failed to send email") from exc

        logger.info("Email sent via Gmail (subject=%r)", message.subject)
