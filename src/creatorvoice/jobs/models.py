"""Job domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from creatorvoice.models.pipeline import PipelineOptions


class JobStatus(str, Enum):
    """Status of a job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobType(str, Enum):
    """Type of job."""

    VOICE_ANALYSIS = "voice_analysis"
    TRANSCRIPT_ANALYSIS = "transcript_analysis"


@dataclass
class JobResult:
    """Result of a completed job."""

    analysis: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    video_meta: list[dict[str, Any]] = field(default_factory=list)
    handoff: dict[str, Any] | None = None
    summary: dict[str, Any] = field(default_factory=dict)


@dataclass
class Job:
    """A background voice analysis job."""

    id: str = field(default_factory=lambda: str(uuid4()))
    type: JobType = JobType.VOICE_ANALYSIS
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    message: str = ""
    params: dict[str, Any] = field(default_factory=dict)
    options: PipelineOptions = field(default_factory=PipelineOptions)
    result: JobResult | None = None
    error: str | None = None
    error_details: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)

    def finish(self, status: JobStatus, message: str) -> None:
        """Move the job to a terminal status and stamp the completion time."""
        self.status = status
        self.message = message
        self.completed_at = datetime.now(timezone.utc)
