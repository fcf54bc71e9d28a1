"""Pipeline-related data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from creatorvoice.errors import CreatorVoiceError
from creatorvoice.models.analysis import CombinedAnalysis
from creatorvoice.models.catalog import TranscriptResult


class StageStatus(str, Enum):
    """Status of a pipeline stage execution."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StageResult(BaseModel):
    """Result of a pipeline stage execution."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: StageStatus = Field(..., description="Execution status")
    message: str | None = Field(None, description="Status message or error description")
    data: dict[str, Any] | None = Field(None, description="Stage output data")
    error: Exception | None = Field(None, exclude=True, description="Typed error on failure")
    elapsed_sec: float | None = Field(None, description="Wall-clock duration of the stage")

    @classmethod
    def success(cls, message: str | None = None, data: dict[str, Any] | None = None) -> "StageResult":
        """Create a successful result."""
        return cls(status=StageStatus.COMPLETED, message=message, data=data)

    @classmethod
    def failure(
        cls,
        message: str,
        error: Exception | None = None,
        data: dict[str, Any] | None = None,
    ) -> "StageResult":
        """Create a failed result."""
        return cls(status=StageStatus.FAILED, message=message, data=data, error=error)

    @classmethod
    def skipped(cls, message: str | None = None) -> "StageResult":
        """Create a skipped result."""
        return cls(status=StageStatus.SKIPPED, message=message, data=None)


class PipelineOptions(BaseModel):
    """Explicit configuration for one voice analysis run."""

    model_config = ConfigDict(frozen=True)

    max_videos: int | None = Field(20, ge=1, description="Catalog cap before transcription")
    worker_concurrency: int = Field(2, ge=1, description="Transcription workers (W)")
    batch_size: int = Field(5, ge=1, description="Transcripts per analysis batch (B)")
    retry_budget: int = Field(2, ge=0, description="Extra attempts per batch (R)")

    model: str = Field("claude-sonnet-4-20250514", description="Generation model")
    temperature: float = Field(0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(6000, ge=1)

    prefer_audio_only: bool = Field(True, description="Ask the scraper for audio-only media")
    use_scrape: bool = Field(True, description="Refresh media URLs through the scraper")

    call_timeout: float | None = Field(120.0, gt=0, description="Deadline per external call (s)")
    parse_retry_delay: float = Field(1.0, ge=0.0)
    network_retry_delay: float = Field(2.0, ge=0.0)
    retry_backoff: float = Field(1.0, ge=1.0, description="Delay multiplier per attempt")
    retry_jitter: float = Field(0.0, ge=0.0, description="Max uniform extra delay (s)")


class AnalysisMeta(BaseModel):
    """Run metadata returned alongside the combined analysis."""

    total_transcripts: int = 0
    batches_processed: int = 0
    batch_size: int = 0
    model: str = ""
    temperature: float = 0.0
    max_tokens: int = 0

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "totalTranscripts": self.total_transcripts,
            "batchesProcessed": self.batches_processed,
            "batchSize": self.batch_size,
            "model": self.model,
            "temperature": self.temperature,
            "maxTokens": self.max_tokens,
        }


class RunStatus(str, Enum):
    """Outcome of a whole pipeline run."""

    SUCCESS = "success"
    FAILURE = "failure"


class PipelineRunResult(BaseModel):
    """Success/failure variant returned by a pipeline run.

    A failure never carries a partial analysis.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: RunStatus
    analysis: CombinedAnalysis | None = None
    transcripts: list[TranscriptResult] = Field(default_factory=list)
    error: CreatorVoiceError | None = Field(None, exclude=True)
    failed_stage: str | None = None
    stage_results: dict[str, StageResult] = Field(default_factory=dict)
    meta: AnalysisMeta = Field(default_factory=AnalysisMeta)

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCESS

    def unwrap(self) -> CombinedAnalysis:
        """Return the analysis, or raise the typed error of a failed run."""
        if self.ok and self.analysis is not None:
            return self.analysis
        if self.error is not None:
            raise self.error
        raise CreatorVoiceError(f"Pipeline failed at stage '{self.failed_stage}'")
