"""Batched analysis stage: transcripts -> per-batch fragments."""

from creatorvoice.errors import NoTranscriptsError
from creatorvoice.models.pipeline import StageResult
from creatorvoice.pipeline.base import PipelineStage, ProgressCallback
from creatorvoice.pipeline.context import PipelineContext
from creatorvoice.services.ai_analysis import BatchAnalysisCoordinator, chunk_transcripts


class BatchAnalysisStage(PipelineStage):
    """Run the batch coordinator over the transcripts in context."""

    def __init__(self, coordinator: BatchAnalysisCoordinator) -> None:
        self._coordinator = coordinator

    @property
    def name(self) -> str:
        return "batch_analysis"

    @property
    def display_name(self) -> str:
        return "Batch Analysis"

    @property
    def description(self) -> str:
        return "Extract templates and style signals batch by batch"

    async def execute(
        self,
        context: PipelineContext,
        progress_callback: ProgressCallback | None = None,
    ) -> StageResult:
        self.raise_if_cancelled(context)
        texts = context.transcript_texts
        if not texts:
            raise NoTranscriptsError("No transcripts to analyze")

        options = context.options
        batch_sizes = [len(batch) for batch in chunk_transcripts(texts, options.batch_size)]
        self._report_progress(
            progress_callback, 0.0, f"Analyzing {len(batch_sizes)} batch(es)"
        )

        def on_batch_done(number: int, total: int) -> None:
            self._report_progress(
                progress_callback, number / total, f"Batch {number}/{total} analyzed"
            )

        fragments = await self._coordinator.run(
            texts,
            options.batch_size,
            options.retry_budget,
            cancel_event=context.cancel_event,
            on_batch_done=on_batch_done,
        )
        context.fragments = fragments
        context.batch_sizes = batch_sizes

        return StageResult.success(
            message=f"Analyzed {len(texts)} transcript(s) in {len(fragments)} batch(es)",
            data={"batches": len(fragments), "batch_sizes": batch_sizes},
        )
