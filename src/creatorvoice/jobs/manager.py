"""Job manager with in-memory storage and background execution."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from creatorvoice.errors import BatchAnalysisFailure, HandoffError, PipelineCancelled
from creatorvoice.jobs.models import Job, JobResult, JobStatus, JobType
from creatorvoice.models.catalog import Platform, TranscriptResult, VideoDescriptor
from creatorvoice.models.pipeline import PipelineOptions, PipelineRunResult, StageStatus
from creatorvoice.pipeline.runner import VoiceAnalysisPipeline
from creatorvoice.services.interfaces import AnalysisHandoff, IAnalysisSink

logger = logging.getLogger(__name__)

PipelineFactory = Callable[[PipelineOptions, str | None, Platform], VoiceAnalysisPipeline]


def video_meta(transcripts: list[TranscriptResult]) -> list[dict[str, Any]]:
    """Per-video metadata for the handoff document."""
    return [
        {
            "videoId": t.video_id,
            "platform": t.platform.value if t.platform else None,
            "url": t.source_url or t.resolved_url,
            "title": t.title,
            "thumbnailUrl": t.thumbnail_url,
        }
        for t in transcripts
    ]


class JobManager:
    """Manages background analysis jobs with concurrency control.

    Jobs are stored in-memory (dict). Background execution uses
    asyncio.create_task with a semaphore for concurrency limiting. When a
    sink is configured, each successful analysis is handed off to it.
    """

    def __init__(
        self,
        pipeline_factory: PipelineFactory,
        sink: IAnalysisSink | None = None,
        max_concurrent: int = 2,
    ) -> None:
        self._pipeline_factory = pipeline_factory
        self._sink = sink
        self._jobs: dict[str, Job] = {}
        self._cancel_events: dict[str, asyncio.Event] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._semaphore = asyncio.Semaphore(max_concurrent)

    def create_job(
        self,
        job_type: JobType,
        params: dict[str, Any],
        options: PipelineOptions,
    ) -> Job:
        """Create a new job and schedule it for background execution.

        Args:
            job_type: Type of job to create.
            params: Job-specific parameters.
            options: Pipeline options for this run.

        Returns:
            The created Job (status=pending).
        """
        job = Job(type=job_type, params=params, options=options)
        self._jobs[job.id] = job
        self._cancel_events[job.id] = asyncio.Event()
        task = asyncio.create_task(self._run_job(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    def get_job(self, job_id: str) -> Job | None:
        """Get a job by ID."""
        return self._jobs.get(job_id)

    def list_jobs(self) -> list[Job]:
        """List all jobs, most recent first."""
        return sorted(self._jobs.values(), key=lambda j: j.created_at, reverse=True)

    def cancel_job(self, job_id: str) -> bool:
        """Request cancellation of a pending or running job.

        Returns:
            True if the job exists and had not finished yet.
        """
        job = self._jobs.get(job_id)
        event = self._cancel_events.get(job_id)
        if job is None or event is None:
            return False
        if job.is_finished:
            return False
        event.set()
        job.message = "Cancelling..."
        return True

    async def _run_job(self, job: Job) -> None:
        """Execute a job with semaphore-based concurrency control."""
        try:
            async with self._semaphore:
                await self._run_claimed(job, self._cancel_events[job.id])
        finally:
            self._cancel_events.pop(job.id, None)

    async def _run_claimed(self, job: Job, cancel_event: asyncio.Event) -> None:
        if cancel_event.is_set():
            job.finish(JobStatus.CANCELLED, "Cancelled")
            return

        job.status = JobStatus.PROCESSING
        job.message = "Starting..."
        try:
            result = await self._execute(job, cancel_event)
        except PipelineCancelled:
            logger.info("Job %s cancelled", job.id)
            job.finish(JobStatus.CANCELLED, "Cancelled")
        except BatchAnalysisFailure as e:
            logger.error("Job %s failed: %s", job.id, e)
            job.error = str(e)
            job.error_details = e.to_dict()
            job.finish(JobStatus.FAILED, "Failed")
        except Exception as e:
            logger.exception("Job %s failed", job.id)
            job.error = str(e)
            job.error_details = {"type": type(e).__name__}
            job.finish(JobStatus.FAILED, "Failed")
        else:
            job.result = result
            job.progress = 100
            job.finish(JobStatus.COMPLETED, "Complete")

    async def _execute(self, job: Job, cancel_event: asyncio.Event) -> JobResult:
        """Dispatch to the appropriate executor based on job type."""
        executors = {
            JobType.VOICE_ANALYSIS: self._exec_voice_analysis,
            JobType.TRANSCRIPT_ANALYSIS: self._exec_transcript_analysis,
        }
        executor = executors[job.type]
        return await executor(job, cancel_event)

    # ------------------------------------------------------------------
    # Executors
    # ------------------------------------------------------------------

    async def _exec_voice_analysis(self, job: Job, cancel_event: asyncio.Event) -> JobResult:
        p = job.params
        descriptors = [VideoDescriptor.model_validate(d) for d in p.get("videos", [])]
        pipeline = self._pipeline_factory(
            job.options, p.get("handle"), Platform(p.get("platform") or "unknown")
        )

        job.message = f"Analyzing {len(descriptors)} video(s)..."
        run = await pipeline.run(
            descriptors,
            exclude_video_ids=p.get("exclude_video_ids", []),
            cancel_event=cancel_event,
            progress_callback=self._progress_reporter(job),
        )
        return await self._finish(job, run)

    async def _exec_transcript_analysis(
        self, job: Job, cancel_event: asyncio.Event
    ) -> JobResult:
        p = job.params
        pipeline = self._pipeline_factory(job.options, None, Platform.UNKNOWN)

        job.message = "Analyzing transcripts..."
        run = await pipeline.analyze_transcripts(
            p.get("transcripts", []),
            cancel_event=cancel_event,
            progress_callback=self._progress_reporter(job),
        )
        return await self._finish(job, run)

    async def _finish(self, job: Job, run: PipelineRunResult) -> JobResult:
        """Turn a pipeline run into a job result, handing off on success."""
        analysis = run.unwrap()
        analysis_json = analysis.to_json_dict()
        meta = video_meta(run.transcripts)

        result = JobResult(
            analysis=analysis_json,
            meta=run.meta.to_json_dict(),
            video_meta=meta,
            summary={
                "transcripts": len(run.transcripts),
                "batches": run.meta.batches_processed,
                "templates": analysis.template_counts,
            },
        )

        if self._sink is not None:
            job.message = "Saving analysis..."
            handoff = AnalysisHandoff(
                creator=job.params.get("creator") or {},
                analysis_json=analysis_json,
                transcripts_count=len(run.transcripts),
                video_meta=meta,
            )
            try:
                result.handoff = await self._sink.deliver(handoff)
            except HandoffError as e:
                logger.error("Job %s analysis handoff failed: %s", job.id, e)
                result.handoff = {"error": str(e)}

        return result

    @staticmethod
    def _progress_reporter(job: Job) -> Callable[[str, StageStatus, float], None]:
        def report(stage_name: str, status: StageStatus, progress: float) -> None:
            job.progress = int(progress * 95)
            job.message = f"{stage_name}: {status.value}"

        return report
