"""Merge stage: per-batch fragments -> combined analysis."""

import logging

from creatorvoice.models.pipeline import StageResult
from creatorvoice.pipeline.base import PipelineStage, ProgressCallback
from creatorvoice.pipeline.context import PipelineContext
from creatorvoice.services.ai_analysis import FragmentMerger

logger = logging.getLogger(__name__)


class MergeStage(PipelineStage):
    """Fold batch fragments into one globally indexed analysis."""

    def __init__(self, merger: FragmentMerger | None = None) -> None:
        self._merger = merger or FragmentMerger()

    @property
    def name(self) -> str:
        return "merge"

    @property
    def display_name(self) -> str:
        return "Merge"

    @property
    def requires(self) -> tuple[str, ...]:
        return ("fragments", "batch_sizes")

    async def validate(self, context: PipelineContext) -> bool:
        if not await super().validate(context):
            return False
        return len(context.fragments) == len(context.batch_sizes)

    async def execute(
        self,
        context: PipelineContext,
        progress_callback: ProgressCallback | None = None,
    ) -> StageResult:
        analysis = self._merger.merge(context.fragments, context.batch_sizes)
        context.analysis = analysis

        counts = analysis.template_counts
        logger.info(
            "Merged %d batch(es): %s, %d breakdown(s), %d power word(s)",
            len(context.fragments),
            ", ".join(f"{n} {name}" for name, n in counts.items()),
            len(analysis.transcripts),
            len(analysis.style_signature.power_words),
        )
        self._report_progress(progress_callback, 1.0, "Merge complete")
        return StageResult.success(
            message="Analysis merged",
            data={"template_counts": counts, "breakdowns": len(analysis.transcripts)},
        )
