"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from modules.users.routes import router as users_router
from shared.config import check_environment, get_settings
from shared.exceptions import DigestError
from shared.logging_config import configure_logging

from .dependencies import get_container
from .middleware.http import register_http_middleware
from .routes import auth, health, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Refuses to start when required settings are missing.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)

    env = check_environment(settings)
    if not env.is_valid:
        for name in env.missing:
            logger.error(f"Missing required environment variable: {name}")
        for name in env.malformed:
            logger.error(f"Malformed environment variable: {name}")
        raise RuntimeError(
            "Invalid environment configuration: "
            f"missing={env.missing} malformed={env.malformed}"
        )

    logger.info(
        f"Starting {settings.app_name} on {settings.host}:{settings.port} "
        f"(store={settings.store_backend}, tokens={settings.token_verification})"
    )
    yield
    # Shutdown
    await get_container().close()
    logger.info(f"Shutting down {settings.app_name}")


def error_status(error: DigestError) -> int:
    """HTTP status for an application error, taken from its category."""
    return error.status_code


async def digest_error_handler(request: Request, exc: DigestError) -> JSONResponse:
    status_code = error_status(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are a 400, not FastAPI's default 422."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Invalid request body",
            "details": {"errors": errors},
        },
    )


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Unknown routes only; handlers raising 404 keep their own detail
    if exc.status_code == 404 and exc.detail == "Not Found":
        logger.info(f"404 - Not Found: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=404,
            content={"message": "Endpoint not found", "path": request.url.path},
        )
    return await http_exception_handler(request, exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="User profiles, digest preferences and read history",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    register_http_middleware(app, settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    app.add_exception_handler(DigestError, digest_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)

    # Register routes
    app.include_router(health.router, tags=["health"])
    app.include_router(system.router, prefix="/api/system", tags=["system"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/user", tags=["user"])

    return app


# Application instance for uvicorn
app = create_app()
