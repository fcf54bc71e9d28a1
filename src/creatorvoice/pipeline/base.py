"""Base class for voice analysis stages."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from creatorvoice.errors import PipelineCancelled
from creatorvoice.models.pipeline import StageResult
from creatorvoice.pipeline.context import PipelineContext

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


class PipelineStage(ABC):
    """One step of a voice analysis run.

    Stages read what earlier stages left on the :class:`PipelineContext`
    (descriptors, transcripts, fragments) and write their own output back to
    it. A stage signals failure by raising a ``CreatorVoiceError``; the
    executor turns that into a failed ``StageResult``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier, used as the key in run results."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for logs and job status."""
        ...

    @property
    def description(self) -> str:
        return ""

    @property
    def requires(self) -> tuple[str, ...]:
        """Context fields that must be non-empty before this stage can run."""
        return ()

    @abstractmethod
    async def execute(
        self,
        context: PipelineContext,
        progress_callback: ProgressCallback | None = None,
    ) -> StageResult:
        """Run the stage against ``context``.

        Args:
            context: Run options plus everything produced so far.
            progress_callback: Receives (fraction of this stage done, message).

        Returns:
            StageResult describing what the stage produced.
        """
        ...

    async def validate(self, context: PipelineContext) -> bool:
        """Check that every field in :attr:`requires` has been filled."""
        missing = [field for field in self.requires if not getattr(context, field)]
        if missing:
            logger.debug("Stage %s is missing context: %s", self.name, ", ".join(missing))
            return False
        return True

    def raise_if_cancelled(self, context: PipelineContext) -> None:
        """Raise PipelineCancelled once the run's cancel event is set."""
        if context.cancel_event is not None and context.cancel_event.is_set():
            raise PipelineCancelled(f"Cancelled before stage '{self.name}'")

    def _report_progress(
        self,
        callback: ProgressCallback | None,
        progress: float,
        message: str,
    ) -> None:
        if callback:
            callback(min(max(progress, 0.0), 1.0), message)
