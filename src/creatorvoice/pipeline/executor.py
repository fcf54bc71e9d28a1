"""Sequential stage runner."""

import logging
import time
from collections.abc import Callable

from creatorvoice.errors import CreatorVoiceError, PipelineError
from creatorvoice.models.pipeline import StageResult, StageStatus
from creatorvoice.pipeline.base import PipelineStage
from creatorvoice.pipeline.context import PipelineContext

logger = logging.getLogger(__name__)

ExecutionCallback = Callable[[str, StageStatus, float], None]


class PipelineExecutor:
    """Runs registered stages in order and stops at the first failure.

    Stages after a failure are reported as skipped so callers always get one
    result per requested stage.
    """

    def __init__(self) -> None:
        self._stages: dict[str, PipelineStage] = {}

    def register_stage(self, stage: PipelineStage) -> None:
        self._stages[stage.name] = stage
        logger.debug("Registered pipeline stage: %s", stage.name)

    def list_stages(self) -> list[tuple[str, str]]:
        """Registered stages as (name, display_name), in registration order."""
        return [(s.name, s.display_name) for s in self._stages.values()]

    async def execute(
        self,
        context: PipelineContext,
        stages: list[str],
        progress_callback: ExecutionCallback | None = None,
    ) -> dict[str, StageResult]:
        """Execute the named stages in order.

        Args:
            context: Shared pipeline context
            stages: Stage names to run, in order
            progress_callback: Optional callback (stage_name, status, overall_progress)

        Returns:
            Stage name -> result, in execution order.
        """
        results: dict[str, StageResult] = {}
        total = len(stages)
        failed: str | None = None

        for i, stage_name in enumerate(stages):
            if failed is not None:
                results[stage_name] = StageResult.skipped(f"Not run after '{failed}' failed")
                continue

            def report(status: StageStatus, fraction: float) -> None:
                if progress_callback:
                    progress_callback(stage_name, status, (i + fraction) / total)

            result = await self._run_stage(stage_name, context, report)
            results[stage_name] = result
            report(result.status, 1.0 if result.status == StageStatus.COMPLETED else 0.0)

            if result.status == StageStatus.FAILED:
                logger.error("Stage %s failed: %s", stage_name, result.message)
                failed = stage_name

        return results

    async def _run_stage(
        self,
        stage_name: str,
        context: PipelineContext,
        report: Callable[[StageStatus, float], None],
    ) -> StageResult:
        stage = self._stages.get(stage_name)
        if stage is None:
            return StageResult.failure(
                f"Unknown stage: {stage_name}",
                error=PipelineError(f"Unknown stage: {stage_name}"),
            )

        report(StageStatus.RUNNING, 0.0)
        if not await stage.validate(context):
            return StageResult.failure(
                "Validation failed",
                error=PipelineError(f"Stage '{stage_name}' cannot run on this context"),
            )

        logger.info("Stage started: %s", stage.display_name)
        started = time.perf_counter()
        try:
            result = await stage.execute(
                context, lambda fraction, _message: report(StageStatus.RUNNING, fraction)
            )
        except CreatorVoiceError as e:
            result = StageResult.failure(str(e), error=e)
        except Exception as e:
            logger.exception("Stage %s raised an unexpected error", stage_name)
            result = StageResult.failure(str(e), error=PipelineError(str(e)))

        result.elapsed_sec = round(time.perf_counter() - started, 3)
        if result.status == StageStatus.FAILED and result.error is None:
            result.error = PipelineError(result.message or f"Stage '{stage_name}' failed")
        if result.status == StageStatus.COMPLETED:
            logger.info("Stage completed: %s (%.1fs)", stage_name, result.elapsed_sec)
        return result
