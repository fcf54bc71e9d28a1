"""End-to-end voice analysis runs."""

import asyncio
import logging
from collections.abc import Iterable

from creatorvoice.errors import CreatorVoiceError, PipelineError
from creatorvoice.models.catalog import TranscriptResult, VideoDescriptor
from creatorvoice.models.pipeline import (
    AnalysisMeta,
    PipelineOptions,
    PipelineRunResult,
    RunStatus,
    StageResult,
    StageStatus,
)
from creatorvoice.pipeline.context import PipelineContext
from creatorvoice.pipeline.executor import ExecutionCallback, PipelineExecutor
from creatorvoice.pipeline.stages import BatchAnalysisStage, MergeStage, TranscriptionStage
from creatorvoice.services.ai_analysis import BatchAnalysisCoordinator, FragmentMerger
from creatorvoice.services.interfaces import IJSONGenerator, IScraper, ITranscriber
from creatorvoice.services.media_resolver import MediaResolver
from creatorvoice.services.transcription import TranscriptionScheduler

logger = logging.getLogger(__name__)

CATALOG_STAGES = ["transcription", "batch_analysis", "merge"]
TRANSCRIPT_STAGES = ["batch_analysis", "merge"]


class VoiceAnalysisPipeline:
    """Catalog -> transcripts -> batch fragments -> combined analysis.

    Collaborators are injected; the only configuration read is the
    ``PipelineOptions`` passed in.
    """

    def __init__(
        self,
        options: PipelineOptions,
        resolver: MediaResolver,
        transcriber: ITranscriber,
        generator: IJSONGenerator,
        scraper: IScraper | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            options: Run configuration.
            resolver: Media URL resolver.
            transcriber: Speech-to-text collaborator.
            generator: Structured-JSON generation collaborator.
            scraper: Optional media URL refresher, used when
                ``options.use_scrape`` is on.
        """
        self.options = options
        scheduler = TranscriptionScheduler(
            resolver,
            transcriber,
            scraper=scraper if options.use_scrape else None,
            prefer_audio_only=options.prefer_audio_only,
            call_timeout=options.call_timeout,
        )
        self._executor = PipelineExecutor()
        self._executor.register_stage(TranscriptionStage(scheduler))
        self._executor.register_stage(
            BatchAnalysisStage(BatchAnalysisCoordinator(generator, options))
        )
        self._executor.register_stage(MergeStage(FragmentMerger()))

    async def run(
        self,
        descriptors: list[VideoDescriptor],
        exclude_video_ids: Iterable[str] = (),
        cancel_event: asyncio.Event | None = None,
        progress_callback: ExecutionCallback | None = None,
    ) -> PipelineRunResult:
        """Run the full pipeline over a catalog.

        Videos whose id is in ``exclude_video_ids`` are dropped first, then
        the catalog is capped at ``options.max_videos``.
        """
        excluded = {str(v) for v in exclude_video_ids}
        selected = [d for d in descriptors if d.id not in excluded]
        if len(selected) != len(descriptors):
            logger.info(
                "Excluded %d already-analyzed video(s)", len(descriptors) - len(selected)
            )
        if self.options.max_videos is not None:
            selected = selected[: self.options.max_videos]

        context = PipelineContext(
            options=self.options, descriptors=selected, cancel_event=cancel_event
        )
        logger.info("Voice analysis run started for %d video(s)", len(selected))
        return await self._execute(context, CATALOG_STAGES, progress_callback)

    async def analyze_transcripts(
        self,
        texts: list[str],
        cancel_event: asyncio.Event | None = None,
        progress_callback: ExecutionCallback | None = None,
    ) -> PipelineRunResult:
        """Analyze transcripts the caller already holds (analysis and merge only)."""
        transcripts = [
            TranscriptResult(source_index=i, text=text)
            for i, text in enumerate(texts)
            if isinstance(text, str) and text.strip()
        ]
        context = PipelineContext(
            options=self.options, transcripts=transcripts, cancel_event=cancel_event
        )
        logger.info("Transcript analysis run started for %d transcript(s)", len(transcripts))
        return await self._execute(context, TRANSCRIPT_STAGES, progress_callback)

    async def _execute(
        self,
        context: PipelineContext,
        stages: list[str],
        progress_callback: ExecutionCallback | None,
    ) -> PipelineRunResult:
        stage_results = await self._executor.execute(context, stages, progress_callback)
        meta = AnalysisMeta(
            total_transcripts=len(context.transcripts),
            batches_processed=len(context.fragments),
            batch_size=self.options.batch_size,
            model=self.options.model,
            temperature=self.options.temperature,
            max_tokens=self.options.max_tokens,
        )

        failed = _first_failure(stage_results)
        if failed is not None:
            name, result = failed
            error = result.error
            if not isinstance(error, CreatorVoiceError):
                error = PipelineError(result.message or f"Stage '{name}' failed")
            logger.error("Voice analysis run failed at stage '%s': %s", name, error)
            return PipelineRunResult(
                status=RunStatus.FAILURE,
                transcripts=context.transcripts,
                error=error,
                failed_stage=name,
                stage_results=stage_results,
                meta=meta,
            )

        if context.analysis is None:
            return PipelineRunResult(
                status=RunStatus.FAILURE,
                transcripts=context.transcripts,
                error=PipelineError("Pipeline finished without an analysis"),
                stage_results=stage_results,
                meta=meta,
            )

        logger.info(
            "Voice analysis run finished: %d transcript(s), %d batch(es)",
            meta.total_transcripts,
            meta.batches_processed,
        )
        return PipelineRunResult(
            status=RunStatus.SUCCESS,
            analysis=context.analysis,
            transcripts=context.transcripts,
            stage_results=stage_results,
            meta=meta,
        )


def _first_failure(results: dict[str, StageResult]) -> tuple[str, StageResult] | None:
    for name, result in results.items():
        if result.status == StageStatus.FAILED:
            return name, result
    return None
