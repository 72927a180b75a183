"""
System diagnostics endpoints.

Unauthenticated; they expose configuration state as booleans and
never return secrets.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from modules.auth.service import AuthGate
from modules.users.service import ProfileService
from shared.config import get_settings

from ..dependencies import get_auth_gate, get_profile_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def store_status(service: ProfileService) -> tuple[str, int | None]:
    """Probe the user store. Returns (status, user count)."""
    try:
        return "connected", await service.count_users()
    except Exception as e:
        logger.error(f"User store check failed: {e}")
        return "error", None


def origin_allowed(origin: str | None) -> bool:
    settings = get_settings()
    return origin is not None and ("*" in settings.cors_origins or origin in settings.cors_origins)


@router.get("/health")
async def system_health(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
    service: ProfileService = Depends(get_profile_service),
) -> dict:
    """Report store, verifier and environment state."""
    settings = get_settings()
    database, _ = await store_status(service)
    verifier = gate.verifier
    origin = request.headers.get("origin")

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {"status": database, "backend": settings.store_backend},
        "auth": {
            "mode": settings.token_verification,
            "configured": verifier is not None and verifier.is_configured,
        },
        "environment": {
            "environment": settings.environment,
            "allowedOrigins": settings.cors_origins,
            "port": settings.port,
        },
        "clientInfo": {
            "ip": request.client.host if request.client else None,
            "origin": origin or "No origin header",
            "userAgent": request.headers.get("user-agent", "No user-agent header"),
        },
        "cors": {"originAllowed": origin_allowed(origin)},
    }


@router.get("/cors-test")
async def cors_test(request: Request) -> dict:
    """Echo the CORS policy as it applies to this request."""
    settings = get_settings()
    origin = request.headers.get("origin")

    return {
        "message": "CORS is working properly",
        "cors": {
            "originAllowed": origin_allowed(origin),
            "allowMethods": settings.cors_allow_methods,
            "allowHeaders": settings.cors_allow_headers,
            "allowCredentials": settings.cors_allow_credentials,
        },
        "requestInfo": {
            "origin": origin or "No origin header",
            "method": request.method,
            "path": request.url.path,
            "headers": {
                "host": request.headers.get("host"),
                "referer": request.headers.get("referer", "No referer"),
                "userAgent": request.headers.get("user-agent"),
            },
        },
    }


@router.get("/db-test")
async def db_test(service: ProfileService = Depends(get_profile_service)):
    """Run a count query against the user store."""
    settings = get_settings()
    try:
        user_count = await service.count_users()
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "message": "Database connection test failed",
                "error": str(e),
                "backend": settings.store_backend,
            },
        )

    return {
        "message": "Database connection test successful",
        "database": {
            "backend": settings.store_backend,
            "table": settings.users_table,
            "userCount": user_count,
        },
    }
