"""
HTTP middleware: request logging and security headers.
"""

import logging
import time

from fastapi import FastAPI, Request

from shared.config import Settings
from shared.logging_config import mask_token

logger = logging.getLogger("api.requests")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

HSTS_VALUE = "max-age=31536000; includeSubDomains"


def authorization_preview(header: str | None) -> str:
    """Loggable form of an Authorization header. Never the full token."""
    if not header:
        return "none"
    scheme, _, credentials = header.partition(" ")
    if not credentials:
        return mask_token(scheme)
    return f"{scheme} {mask_token(credentials.strip())}"


def register_http_middleware(app: FastAPI, settings: Settings) -> None:
    """Attach request logging and security header middleware to ``app``."""

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if not settings.debug:
            response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
        return response

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        started = time.perf_counter()
        logger.info(
            f"{request.method} {request.url.path} "
            f"auth={authorization_preview(request.headers.get('authorization'))}"
        )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                f"{request.method} {request.url.path} failed after {duration_ms:.1f}ms"
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)"
        )
        return response
