"""
JWT bearer token creation and verification.

Tokens are HMAC-signed JWTs (PyJWT) whose payload is ``{"id": <user id>}``
plus ``iat`` / ``exp`` claims.  The same tokens authorise password resets.

Verification pins the accepted algorithm to the configured one, so a token
whose header names another algorithm (or ``none``) is rejected regardless of
what the header says.  There is no revocation: a token stays valid until it
expires.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Union

import jwt

from auth.errors import ConfigurationError, InvalidInput, InvalidToken

SUBJECT_CLAIM = "id"
SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_expires_in(value: Union[int, str, None]) -> int:
    """
    Turn a configured token lifetime into seconds.

    Accepts an int, a digit string (seconds) or a number with a unit
    suffix: ``"90s"``, ``"30m"``, ``"1h"``, ``"7d"``, ``"2w"``.
    """
    if value is None or value == "":
        raise ConfigurationError("JWT expiration time is required to generate a token")
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid JWT expiration time: {value!r}")
    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise ConfigurationError(f"Invalid JWT expiration time: {value!r}")
        seconds = int(match.group(1)) * _UNIT_SECONDS[match.group(2).lower()]
    if seconds <= 0:
        raise ConfigurationError("JWT expiration time must be positive")
    return seconds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TokenClaims:
    """Decoded, verified token payload."""

    subject: str
    issued_at: datetime
    expires_at: datetime
    raw: Dict[str, Any] = field(default_factory=dict)


class TokenService:
    """Issue and verify signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: Optional[str],
        expires_in: Union[int, str, None],
        *,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._secret = secret
        self._expires_in = expires_in
        self.algorithm = algorithm
        self._clock = clock or _utcnow

    def _signing_key(self) -> str:
        if not self._secret:
            raise ConfigurationError("JWT secret is required")
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(f"Unsupported JWT algorithm: {self.algorithm}")
        return self._secret

    def ensure_configured(self) -> None:
        """Raise ``ConfigurationError`` unless tokens can be issued right now."""
        self._signing_key()
        parse_expires_in(self._expires_in)

    def issue(self, subject: Union[str, uuid.UUID]) -> str:
        """Create a signed token for ``subject`` (a user id)."""
        if isinstance(subject, uuid.UUID):
            subject = str(subject)
        if not isinstance(subject, str) or not subject.strip():
            raise InvalidInput("User ID is required to generate a token and must be a string")

        key = self._signing_key()
        lifetime = parse_expires_in(self._expires_in)

        now = self._clock()
        payload = {
            SUBJECT_CLAIM: subject,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=lifetime)).timestamp()),
        }
        return jwt.encode(payload, key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidInput`` for an empty token and ``InvalidToken`` for
        anything that fails signature, structure, expiry or subject checks.
        """
        if not token or not isinstance(token, str):
            raise InvalidInput("Token is required")

        key = self._signing_key()
        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidToken("Token has expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidToken("Invalid token") from exc

        subject = payload.get(SUBJECT_CLAIM)
        if not isinstance(subject, str) or not subject:
            raise InvalidToken("Token payload has no subject")

        return TokenClaims(
            subject=subject,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            raw=payload,
        )
