"""
Health check endpoints.

Provides endpoints for monitoring application health and liveness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.users.service import ProfileService

from ..dependencies import get_profile_service
from .system import store_status

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    database: str


class RootResponse(BaseModel):
    message: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    service: ProfileService = Depends(get_profile_service),
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 while the API is running, even if the store is down.
    """
    database, _ = await store_status(service)
    return HealthResponse(status="ok", database=database)


@router.get("/", response_model=RootResponse)
async def root() -> RootResponse:
    return RootResponse(message="API server is running")
