"""Job management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from creatorvoice.api.deps import get_job_manager, get_settings
from creatorvoice.api.schemas import (
    JobCreateResponse,
    JobListItem,
    JobResultResponse,
    JobStatusResponse,
    TranscriptAnalysisJobRequest,
    VoiceAnalysisJobRequest,
)
from creatorvoice.config import Settings
from creatorvoice.jobs.manager import JobManager
from creatorvoice.jobs.models import JobStatus, JobType
from creatorvoice.models.catalog import VideoDescriptor

router = APIRouter(prefix="/api/v1/jobs", tags=["jobs"])


# ------------------------------------------------------------------
# POST: create jobs (202 Accepted)
# ------------------------------------------------------------------


@router.post("/voice-analysis", response_model=JobCreateResponse, status_code=202)
async def create_voice_analysis_job(
    req: VoiceAnalysisJobRequest,
    mgr: JobManager = Depends(get_job_manager),
    settings: Settings = Depends(get_settings),
) -> JobCreateResponse:
    if not req.videos:
        raise HTTPException(status_code=400, detail="No videos provided")
    for position, video in enumerate(req.videos, start=1):
        try:
            VideoDescriptor.model_validate(video)
        except ValidationError as e:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid video at position {position}: {e.errors()[0]['msg']}",
            ) from e
    params = {
        "videos": req.videos,
        "handle": req.handle,
        "platform": req.platform.value,
        "exclude_video_ids": req.exclude_video_ids,
        "creator": req.creator,
    }
    job = mgr.create_job(
        JobType.VOICE_ANALYSIS, params, settings.pipeline_options(**req.overrides())
    )
    return JobCreateResponse(job_id=job.id, status=job.status.value, type=job.type.value)


@router.post("/transcript-analysis", response_model=JobCreateResponse, status_code=202)
async def create_transcript_analysis_job(
    req: TranscriptAnalysisJobRequest,
    mgr: JobManager = Depends(get_job_manager),
    settings: Settings = Depends(get_settings),
) -> JobCreateResponse:
    if not any(t.strip() for t in req.transcripts):
        raise HTTPException(status_code=400, detail="No transcripts provided")
    job = mgr.create_job(
        JobType.TRANSCRIPT_ANALYSIS,
        {"transcripts": req.transcripts, "creator": req.creator},
        settings.pipeline_options(**req.overrides()),
    )
    return JobCreateResponse(job_id=job.id, status=job.status.value, type=job.type.value)


@router.post("/{job_id}/cancel", response_model=JobListItem)
async def cancel_job(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),
) -> JobListItem:
    job = mgr.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    if not mgr.cancel_job(job_id):
        raise HTTPException(status_code=409, detail=f"Job already {job.status.value}")
    return JobListItem(
        job_id=job.id, type=job.type.value, status=job.status.value, created_at=job.created_at
    )


# ------------------------------------------------------------------
# GET: query jobs
# ------------------------------------------------------------------


@router.get("", response_model=list[JobListItem])
async def list_jobs(
    mgr: JobManager = Depends(get_job_manager),
) -> list[JobListItem]:
    return [
        JobListItem(
            job_id=j.id,
            type=j.type.value,
            status=j.status.value,
            created_at=j.created_at,
        )
        for j in mgr.list_jobs()
    ]


@router.get("/{job_id}", response_model=JobStatusResponse)
async def get_job(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),
) -> JobStatusResponse:
    job = mgr.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return JobStatusResponse(
        job_id=job.id,
        type=job.type.value,
        status=job.status.value,
        progress=job.progress,
        message=job.message,
        summary=job.result.summary if job.result is not None else None,
        error=job.error,
        error_details=job.error_details,
        created_at=job.created_at,
        completed_at=job.completed_at,
    )


@router.get("/{job_id}/result", response_model=JobResultResponse)
async def get_job_result(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),
) -> JobResultResponse:
    job = mgr.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.status != JobStatus.COMPLETED or job.result is None:
        raise HTTPException(
            status_code=409,
            detail=f"Job is {job.status.value}, no result available",
        )

    return JobResultResponse(
        analysis=job.result.analysis,
        meta=job.result.meta,
        video_meta=job.result.video_meta,
        handoff=job.result.handoff,
        summary=job.result.summary,
    )
