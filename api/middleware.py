"""
Request logging middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def _caller(request: Request) -> str:
    # set by the auth gate on protected routes
    return getattr(request.state, "user_id", None) or "anonymous"


def register_middleware(app: FastAPI) -> None:
    """Attach the request access log."""

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        # path only: query strings may carry reset tokens
        level = logging.WARNING if response.status_code in (401, 403) else logging.INFO
        logger.log(
            level,
            "%s %s → %d (%.3fs) user=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            _caller(request),
        )
        return response
