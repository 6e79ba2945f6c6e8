"""
Middleware configuration for the FastAPI app.
"""

from __future__ import annotations

import os
import time
import uuid

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

import saypi.config as config
from saypi.context import (
    RequestContext,
    reset_current_request_context,
    set_current_request_context,
)

REQUEST_ID_HEADER = "X-Request-Id"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Assign a request id and log one line per request."""

    async def dispatch(self, request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = set_current_request_context(
            RequestContext(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
            )
        )
        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            reset_current_request_context(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        config.logger.info(
            "request_completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": int((time.monotonic() - start) * 1000),
            },
        )
        return response


def configure_middleware(app) -> None:
    """Configure request logging, host allowlist, and CORS middleware."""
    app.add_middleware(RequestLogMiddleware)

    # Optional host allowlist for production deployments
    trusted_hosts_env = os.environ.get("TRUSTED_HOSTS", "")
    trusted_hosts = [host.strip() for host in trusted_hosts_env.split(",") if host.strip()]
    if trusted_hosts:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=trusted_hosts,
        )

    cors_allowed_env = os.environ.get("CORS_ALLOWED_ORIGINS", "")
    allow_origins = [origin.strip() for origin in cors_allowed_env.split(",") if origin.strip()]
    if allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
