"""HTTP application entry point."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from creatorvoice import __version__
from creatorvoice.api.deps import init_job_manager
from creatorvoice.api.routes import health, jobs, voice
from creatorvoice.config import settings
from creatorvoice.errors import CreatorVoiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the job manager on startup."""
    init_job_manager(max_concurrent=settings.max_concurrent_jobs)
    logger.info(
        "creatorvoice %s ready (generator=%s, scrape=%s, handoff=%s)",
        __version__,
        settings.generator_provider,
        "on" if settings.scrape_url else "off",
        "on" if settings.handoff_url else "off",
    )
    yield


async def _creatorvoice_error_handler(request: Request, exc: CreatorVoiceError) -> JSONResponse:
    logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": str(exc), "type": type(exc).__name__}},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="creatorvoice",
        description="Creator voice analysis: script templates and style signatures",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(CreatorVoiceError, _creatorvoice_error_handler)

    app.include_router(health.router)
    app.include_router(voice.router)
    app.include_router(jobs.router)

    return app


app = create_app()


def main() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    uvicorn.run(
        "creatorvoice.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
