"""High-level authentication workflows."""

from __future__ import annotations

import functools
import logging
from typing import Awaitable, Callable, Optional, TypeVar
from urllib.parse import urlencode

from auth.base import IdentityVerifier, MailSender, UserStore
from auth.errors import (
    AuthError,
    ConfigurationError,
    Conflict,
    EmailDeliveryError,
    FlowResult,
    InvalidInput,
    InvalidToken,
    NotFound,
    Unauthorized,
    UniqueViolation,
    error_result,
)
from auth.jwt import TokenService
from auth.models import MailMessage, UserRecord
from auth.password import PasswordHasher
from auth.schemas import (
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")


def flow(operation: str, failure_message: str):
    """
    Run a flow and turn whatever it raises into a ``FlowResult``.

    ``AuthError`` keeps its own status and message.  Anything else is
    logged with a traceback and answered with a 500 ``failure_message``.
    """

    def decorator(
        func: Callable[["AuthService", RequestT], Awaitable[FlowResult]],
    ) -> Callable[["AuthService", RequestT], Awaitable[FlowResult]]:
        @functools.wraps(func)
        async def wrapper(self: "AuthService", req: RequestT) -> FlowResult:
            try:
                return await func(self, req)
            except AuthError as exc:
                logger.warning(
                    "%s rejected (%d): %s", operation, exc.status_code, exc.message
                )
                return error_result(exc)
            except Exception:
                logger.exception("%s error", operation)
                return FlowResult(500, {"error": failure_message})

        return wrapper

    return decorator


class AuthService:
    """Register, login, Google login and password reset."""

    def __init__(
        self,
        *,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        identity_verifier: Optional[IdentityVerifier] = None,
        mailer: Optional[MailSender] = None,
        frontend_url: str = "http://localhost:3000",
        unify_login_errors: bool = False,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.identity_verifier = identity_verifier
        self.mailer = mailer
        self.frontend_url = frontend_url.rstrip("/")
        self.unify_login_errors = unify_login_errors

    @flow("register", "Registration failed")
    async def register(self, req: RegisterRequest) -> FlowResult:
        if not req.email or not req.password:
            raise InvalidInput("Email and password are required")

        # nothing is written unless a token can be handed back afterwards
        self.tokens.ensure_configured()
        hashed = await self.hasher.hash_async(req.password)
        try:
            user = await self.store.insert(req.email, hashed)
        except UniqueViolation:
            raise Conflict("Email already registered") from None

        token = self.tokens.issue(user.id)
        logger.info("Registered user %s", user.id)
        return FlowResult(201, {"message": "User registered", "token": token})

    @flow("login", "Login failed")
    async def login(self, req: LoginRequest) -> FlowResult:
        if not req.email or not req.password:
            raise InvalidInput("Email and password are required")

        user = await self.store.find_by_email(req.email)
        if user is None:
            if self.unify_login_errors:
                raise Unauthorized("Invalid credentials")
            raise Unauthorized("User not found")

        # Google-only accounts have no password to match
        if not user.has_password:
            raise Unauthorized("Invalid credentials")
        if not await self.hasher.compare_async(req.password, user.password_hash):
            raise Unauthorized("Invalid credentials")

        token = self.tokens.issue(user.id)
        logger.info("Login: %s", user.id)
        return FlowResult(200, {"message": "Login successful", "token": token})

    @flow("google_login", "Google login failed")
    async def google_login(self, req: GoogleLoginRequest) -> FlowResult:
        if not req.token_id:
            raise InvalidInput("Token ID is required")
        self.tokens.ensure_configured()
        if self.identity_verifier is None or not self.identity_verifier.is_configured():
            raise ConfigurationError("Google Client ID is not set")

        identity = await self.identity_verifier.verify_external_token(req.token_id)
        if not identity.email:
            raise InvalidInput("Email is required")

        user = await self._find_or_create_oauth_user(identity.email)
        token = self.tokens.issue(user.id)
        logger.info("Google login: %s", user.id)
        return FlowResult(200, {"message": "Google login successful", "token": token})

    async def _find_or_create_oauth_user(self, email: str) -> UserRecord:
        user = await self.store.find_by_email(email)
        if user is not None:
            return user
        try:
            user = await self.store.insert(email, None)
            logger.info("Created Google-only user %s", user.id)
            return user
        except UniqueViolation:
            # A concurrent first login for the same email won the insert
            user = await self.store.find_by_email(email)
            if user is None:
                raise Conflict("User creation conflicted, please retry") from None
            return user

    @flow("forgot_password", "Failed to send reset password email")
    async def forgot_password(self, req: ForgotPasswordRequest) -> FlowResult:
        if not req.email:
            raise InvalidInput("Email is required")
        if self.mailer is None or not self.mailer.is_configured():
            raise ConfigurationError("Email credentials are not set")

        user = await self.store.find_by_email(req.email)
        if user is None:
            raise NotFound("User not found")

        reset_token = self.tokens.issue(user.id)
        message = MailMessage(
            to=user.email,
            subject="Reset Password",
            body=(
                "A password reset was requested for your account.\n"
                f"Click the following link to reset your password:\n"
                f"{self.reset_link(reset_token)}\n\n"
                "If you did not request this, you can safely ignore this message."
            ),
        )
        try:
            await self.mailer.send(message)
        except EmailDeliveryError:
            raise EmailDeliveryError("Failed to send reset password email") from None

        logger.info("Password reset email sent for user %s", user.id)
        return FlowResult(200, {"message": "Reset password email sent"})

    @flow("reset_password", "Password reset failed")
    async def reset_password(self, req: ResetPasswordRequest) -> FlowResult:
        if not req.token or not req.new_password:
            raise InvalidInput("Token and new password are required")

        try:
            claims = self.tokens.verify(req.token)
        except (InvalidToken, InvalidInput):
            raise Unauthorized("Invalid token") from None

        hashed = await self.hasher.hash_async(req.new_password)
        updated = await self.store.update_password(claims.subject, hashed)
        if not updated:
            raise NotFound("User not found")

        logger.info("Password reset for user %s", claims.subject)
        return FlowResult(200, {"message": "Password reset successful"})

    def reset_link(self, token: str) -> str:
        return f"{self.frontend_url}/reset-password?{urlencode({'token': token})}"
