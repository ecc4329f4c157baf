"""Health check API endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from graphapp import __version__

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for container orchestration.

    Returns:
        HealthResponse with service status
    """
    return HealthResponse(status="healthy", service="graphapp-server", version=__version__)
