"""CORS, request tracing, and client-address helpers."""

import uuid
import time
import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from staff_directory.core.config import settings

logger = logging.getLogger("staff_directory")

# Polled by load balancers; logged at DEBUG only.
QUIET_PATHS = {"/api/health"}


def client_address(request: Request) -> str:
    """Best-effort origin address, honouring a reverse proxy's X-Forwarded-For."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log it with caller address and timing.

    An incoming ``X-Request-Id`` from a proxy is reused so log lines can be
    correlated across hops.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers["X-Request-Id"] = request_id
        response.headers["X-Response-Time-Ms"] = str(elapsed_ms)

        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        logger.log(
            level,
            "%s %s -> %s in %sms [%s from %s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
            client_address(request),
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install CORS and access logging."""
    # The admin UI sends the session cookie cross-origin in development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )

    app.add_middleware(AccessLogMiddleware)
