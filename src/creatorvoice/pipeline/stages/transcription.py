"""Transcription stage: catalog -> ordered transcripts."""

from creatorvoice.errors import NoTranscriptsError
from creatorvoice.models.pipeline import StageResult
from creatorvoice.pipeline.base import PipelineStage, ProgressCallback
from creatorvoice.pipeline.context import PipelineContext
from creatorvoice.services.transcription import TranscriptionScheduler


class TranscriptionStage(PipelineStage):
    """Transcribe the catalog with the bounded worker pool.

    Per-video failures are skipped by the scheduler. A catalog that yields
    no transcript at all fails the stage with :class:`NoTranscriptsError`.
    """

    def __init__(self, scheduler: TranscriptionScheduler) -> None:
        self._scheduler = scheduler

    @property
    def name(self) -> str:
        return "transcription"

    @property
    def display_name(self) -> str:
        return "Transcription"

    @property
    def description(self) -> str:
        return "Resolve, scrape and transcribe every catalog video"

    async def execute(
        self,
        context: PipelineContext,
        progress_callback: ProgressCallback | None = None,
    ) -> StageResult:
        self.raise_if_cancelled(context)
        total = len(context.descriptors)
        self._report_progress(progress_callback, 0.0, f"Transcribing {total} video(s)")

        transcripts = await self._scheduler.run(
            context.descriptors,
            context.options.worker_concurrency,
            cancel_event=context.cancel_event,
        )
        context.transcripts = transcripts

        if not transcripts:
            raise NoTranscriptsError(f"No videos could be transcribed (0 of {total})")

        self._report_progress(progress_callback, 1.0, "Transcription complete")
        return StageResult.success(
            message=f"Transcribed {len(transcripts)} of {total} video(s)",
            data={
                "requested": total,
                "transcribed": len(transcripts),
                "skipped": total - len(transcripts),
            },
        )
