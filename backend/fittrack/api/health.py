"""Health check endpoint.

Lives outside /api so monitoring probes are neither rate limited nor
subject to CSRF checks.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fittrack.api.deps import get_app_settings
from fittrack.core.config import Settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(status="healthy", version=settings.app_version)
