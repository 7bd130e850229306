"""
Storefront API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService
from config.settings import Settings, config
from connectors.gmail import GmailSender
from connectors.google_identity import GoogleIdentityVerifier
from database.session import create_engine_from_url, create_session_factory, create_tables
from database.user_store import SqlUserStore

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("googleapiclient.discovery_cache", "urllib3", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_auth_service(settings: Settings, store) -> AuthService:
    """Wire the auth flows to their collaborators from ``settings``."""
    return AuthService(
        store=store,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenService(
            settings.jwt_secret,
            settings.jwt_expires_in,
            algorithm=settings.jwt_algorithm,
        ),
        identity_verifier=GoogleIdentityVerifier(settings.google_client_id),
        mailer=GmailSender(
            sender_email=settings.gmail_sender_email,
            refresh_token=settings.gmail_refresh_token,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
        ),
        frontend_url=settings.frontend_url,
        unify_login_errors=settings.auth_unify_login_errors,
    )


def _install(app: FastAPI, service: AuthService) -> None:
    app.state.auth_service = service
    app.state.token_service = service.tokens


def create_app(
    settings: Optional[Settings] = None,
    *,
    auth_service: Optional[AuthService] = None,
) -> FastAPI:
    """
    Build the application.

    Services are created by the startup hook (database engine included)
    unless ``auth_service`` is given, in which case it is used as-is.
    """
    settings = settings or config

    app = FastAPI(
        title="Storefront API",
        version="1.0.0",
        description="E-commerce backend: authentication and authorization.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")

    if auth_service is not None:
        _install(app, auth_service)

    @app.on_event("startup")
    async def on_startup():
        missing = settings.missing_auth_settings()
        if missing:
            logger.error(
                "Missing auth settings: %s — token issuance will fail until set",
                ", ".join(missing),
            )
        if not settings.google_client_id:
            logger.warning("GOOGLE_CLIENT_ID not set — Google login disabled")
        if not settings.mail_configured():
            logger.warning("Gmail sender not configured — password reset emails disabled")

        if auth_service is None:
            engine = create_engine_from_url(settings.database_url)
            if settings.debug:
                await create_tables(engine)
            app.state.engine = engine
            _install(app, build_auth_service(settings, SqlUserStore(create_session_factory(engine))))

        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()
            logger.info("Database engine disposed")

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
