"""
Auth API routes — register, login, Google login, password reset.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from auth.dependencies import get_auth_service, get_current_identity
from auth.errors import FlowResult
from auth.models import AuthIdentity
from auth.schemas import (
    ErrorResponse,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    IdentityResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

_ERRORS = {code: {"model": ErrorResponse} for code in (400, 401, 404, 409, 500, 502)}


def _respond(result: FlowResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses=_ERRORS,
)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Register a new user with email + password."""
    return _respond(await service.register(req))


@router.post("/login", response_model=TokenResponse, responses=_ERRORS)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Login with email + password."""
    return _respond(await service.login(req))


@router.post("/google-login", response_model=TokenResponse, responses=_ERRORS)
async def google_login(
    req: GoogleLoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Login (or sign up) with a Google ID token."""
    return _respond(await service.google_login(req))


@router.post("/forgot-password", response_model=MessageResponse, responses=_ERRORS)
async def forgot_password(
    req: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Email a password reset link."""
    return _respond(await service.forgot_password(req))


@router.post("/reset-password", response_model=MessageResponse, responses=_ERRORS)
async def reset_password(
    req: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """Set a new password using a reset token."""
    return _respond(await service.reset_password(req))


@router.get(
    "/me",
    response_model=IdentityResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def me(identity: AuthIdentity = Depends(get_current_identity)) -> dict:
    """Return the identity carried by the caller's token."""
    return {
        "user_id": identity.user_id,
        "issued_at": int(identity.claims.issued_at.timestamp()),
        "expires_at": int(identity.claims.expires_at.timestamp()),
    }
