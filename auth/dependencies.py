"""
FastAPI dependencies for authentication.

Provides the auth gate (``get_current_identity`` / ``get_current_user_id``)
used across all protected routes, plus accessors for the services the
startup routine puts on ``app.state``.

The gate only checks the token.  It never looks the user up, so a route
that needs the account to still exist has to check that itself.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param

from auth.errors import Forbidden, InvalidInput, InvalidToken, Unauthorized
from auth.jwt import TokenService
from auth.models import AuthIdentity
from auth.service import AuthService

logger = logging.getLogger(__name__)

TOKEN_BODY_FIELD = "token"


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    scheme, param = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not param:
        return None
    return param


async def _token_from_body(request: Request) -> Optional[str]:
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body: Any = await request.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        token = body.get(TOKEN_BODY_FIELD)
        if isinstance(token, str) and token:
            return token
    return None


def authenticate(token: Optional[str], tokens: TokenService) -> AuthIdentity:
    """
    Resolve ``token`` to an identity.

    Raises ``Unauthorized`` when no token was presented and ``Forbidden``
    when one was presented but does not verify.
    """
    if not token:
        raise Unauthorized("Unauthorized: No token provided")
    try:
        claims = tokens.verify(token)
    except (InvalidToken, InvalidInput) as exc:
        logger.info("Rejected bearer token: %s", exc.message)
        raise Forbidden("Forbidden: Invalid token") from None
    return AuthIdentity(user_id=claims.subject, claims=claims)


async def get_current_identity(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> AuthIdentity:
    """
    Extract the token (Authorization header first, then a ``token`` field
    in a JSON body), verify it and attach the identity to ``request.state``.
    """
    token = bearer_token(request.headers.get("Authorization"))
    if token is None:
        token = await _token_from_body(request)

    identity = authenticate(token, tokens)
    request.state.identity = identity
    request.state.user_id = identity.user_id
    return identity


async def get_current_user_id(
    identity: AuthIdentity = Depends(get_current_identity),
) -> str:
    """Return the authenticated ``user_id`` (UUID string)."""
    return identity.user_id
