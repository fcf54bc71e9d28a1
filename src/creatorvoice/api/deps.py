"""FastAPI dependencies."""

from __future__ import annotations

from collections.abc import Callable

from creatorvoice.config import Settings, settings
from creatorvoice.jobs.manager import JobManager
from creatorvoice.models.catalog import Platform
from creatorvoice.models.pipeline import PipelineOptions
from creatorvoice.pipeline.factory import create_pipeline, create_sink
from creatorvoice.pipeline.runner import VoiceAnalysisPipeline

_job_manager: JobManager | None = None


def build_pipeline(
    options: PipelineOptions,
    handle: str | None = None,
    platform: Platform = Platform.UNKNOWN,
) -> VoiceAnalysisPipeline:
    """Create a pipeline from the application settings."""
    return create_pipeline(settings, options, default_handle=handle, default_platform=platform)


def init_job_manager(max_concurrent: int = 2) -> JobManager:
    """Initialize the global JobManager (called at app startup)."""
    global _job_manager
    _job_manager = JobManager(
        pipeline_factory=build_pipeline,
        sink=create_sink(settings),
        max_concurrent=max_concurrent,
    )
    return _job_manager


def get_job_manager() -> JobManager:
    """Dependency that provides the JobManager instance."""
    if _job_manager is None:
        raise RuntimeError("JobManager not initialized, call init_job_manager() first")
    return _job_manager


def get_settings() -> Settings:
    """Dependency that provides the application settings."""
    return settings


def get_pipeline_factory() -> Callable[..., VoiceAnalysisPipeline]:
    """Dependency that provides the pipeline factory used by synchronous routes."""
    return build_pipeline
