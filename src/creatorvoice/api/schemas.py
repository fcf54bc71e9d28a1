"""Request and response schemas for the creatorvoice API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from creatorvoice.models.catalog import Platform


class _CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Run overrides
# ------------------------------------------------------------------


class RunOptionsRequest(_CamelSchema):
    """Per-request overrides of the pipeline defaults."""

    max_videos: int | None = Field(None, ge=1)
    worker_concurrency: int | None = Field(None, ge=1)
    batch_size: int | None = Field(None, ge=1)
    retry_budget: int | None = Field(None, ge=0)
    model: str | None = None
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, ge=1)
    prefer_audio_only: bool | None = None
    use_scrape: bool | None = None

    def overrides(self) -> dict[str, Any]:
        """Option overrides only, ready for ``Settings.pipeline_options``."""
        return self.model_dump(include=set(RunOptionsRequest.model_fields))


# ------------------------------------------------------------------
# Synchronous analysis
# ------------------------------------------------------------------


class AnalyzeBatchRequest(RunOptionsRequest):
    transcripts: list[str] = Field(default_factory=list, description="Transcript texts")


class AnalyzeBatchResponse(_CamelSchema):
    success: bool = True
    analysis: dict[str, Any]
    meta: dict[str, Any]


# ------------------------------------------------------------------
# Job creation requests
# ------------------------------------------------------------------


class VoiceAnalysisJobRequest(RunOptionsRequest):
    videos: list[dict[str, Any]] = Field(..., description="Catalog of video descriptors")
    handle: str | None = Field(None, description="Creator handle for TikTok URLs")
    platform: Platform = Field(Platform.UNKNOWN, description="Default platform")
    exclude_video_ids: list[str] = Field(
        default_factory=list, description="Ids of videos already analyzed"
    )
    creator: dict[str, Any] = Field(
        default_factory=dict, description="Creator profile forwarded to the handoff"
    )


class TranscriptAnalysisJobRequest(RunOptionsRequest):
    transcripts: list[str] = Field(..., description="Transcript texts")
    creator: dict[str, Any] = Field(default_factory=dict)


# ------------------------------------------------------------------
# Job responses
# ------------------------------------------------------------------


class JobCreateResponse(BaseModel):
    job_id: str
    status: str
    type: str


class JobResultResponse(BaseModel):
    analysis: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    video_meta: list[dict[str, Any]] = Field(default_factory=list)
    handoff: dict[str, Any] | None = None
    summary: dict[str, Any] = Field(default_factory=dict)


class JobStatusResponse(BaseModel):
    job_id: str
    type: str
    status: str
    progress: int = 0
    message: str = ""
    summary: dict[str, Any] | None = None
    error: str | None = None
    error_details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    completed_at: datetime | None = None


class JobListItem(BaseModel):
    job_id: str
    type: str
    status: str
    created_at: datetime
