"""Liveness and configuration check."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from creatorvoice import __version__
from creatorvoice.api.deps import get_settings
from creatorvoice.config import Settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    generator: str
    scrape_enabled: bool
    handoff_enabled: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Report liveness plus which collaborators this instance is wired to."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        generator=settings.generator_provider,
        scrape_enabled=bool(settings.scrape_url) and settings.use_scrape,
        handoff_enabled=bool(settings.handoff_url),
    )
