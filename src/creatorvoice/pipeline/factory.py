"""Wire a VoiceAnalysisPipeline from application settings."""

import logging

from creatorvoice.config import Settings
from creatorvoice.errors import PipelineError
from creatorvoice.models.catalog import Platform
from creatorvoice.models.pipeline import PipelineOptions
from creatorvoice.pipeline.runner import VoiceAnalysisPipeline
from creatorvoice.services.ai_analysis.providers import ClaudeJSONGenerator, HttpJSONGenerator
from creatorvoice.services.interfaces import IAnalysisSink, IJSONGenerator
from creatorvoice.services.handoff import HttpAnalysisSink
from creatorvoice.services.media_resolver import MediaResolver
from creatorvoice.services.transcription import HttpScraper, HttpTranscriber

logger = logging.getLogger(__name__)


def create_generator(settings: Settings) -> IJSONGenerator:
    """Build the configured JSON generation provider.

    Raises:
        PipelineError: If the provider name is unknown.
    """
    provider = settings.generator_provider.strip().lower()
    if provider == "claude":
        return ClaudeJSONGenerator(api_key=settings.anthropic_api_key)
    if provider == "http":
        return HttpJSONGenerator(
            settings.generation_url,
            timeout=settings.call_timeout or settings.collaborator_timeout,
        )
    raise PipelineError(f"Unknown generator provider: {settings.generator_provider}")


def create_sink(settings: Settings) -> IAnalysisSink | None:
    """Build the handoff sink, or None when no endpoint is configured."""
    if not settings.handoff_url:
        return None
    return HttpAnalysisSink(settings.handoff_url, timeout=settings.collaborator_timeout)


def create_pipeline(
    settings: Settings,
    options: PipelineOptions | None = None,
    default_handle: str | None = None,
    default_platform: Platform = Platform.UNKNOWN,
) -> VoiceAnalysisPipeline:
    """Create a pipeline with HTTP/SDK collaborators from ``settings``.

    Args:
        settings: Application settings (endpoints, provider, defaults).
        options: Per-run options; defaults to ``settings.pipeline_options()``.
        default_handle: Creator handle for descriptors that carry none.
        default_platform: Platform for descriptors marked unknown.
    """
    options = options or settings.pipeline_options()
    generator = create_generator(settings)
    if not generator.is_available:
        logger.warning("Generation provider '%s' is not available", generator.name)

    scraper = HttpScraper(settings.scrape_url) if settings.scrape_url else None
    return VoiceAnalysisPipeline(
        options=options,
        resolver=MediaResolver(default_handle=default_handle, default_platform=default_platform),
        transcriber=HttpTranscriber(
            settings.transcribe_url, timeout=settings.collaborator_timeout
        ),
        generator=generator,
        scraper=scraper,
    )
