"""Custom exceptions for creatorvoice."""

from __future__ import annotations


class CreatorVoiceError(Exception):
    """Base exception for creatorvoice."""

    pass


class ResolutionError(CreatorVoiceError):
    """No usable media URL could be resolved for a video."""

    def __init__(self, message: str, video_id: str | None = None) -> None:
        super().__init__(message)
        self.video_id = video_id


class TranscriptionError(CreatorVoiceError):
    """Transcription of a single video failed."""

    pass


class ScrapeError(TranscriptionError):
    """Scraping a fresher media URL failed."""

    pass


class ParseError(CreatorVoiceError):
    """Generation output was not a usable analysis JSON object."""

    pass


class TransientNetworkError(CreatorVoiceError):
    """Timeout or gateway-class failure talking to an external service."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerationError(CreatorVoiceError):
    """Non-retryable failure from the JSON generation collaborator."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BatchAnalysisFailure(CreatorVoiceError):
    """A batch exhausted its retry budget; the whole run is invalid.

    Attributes:
        batch_index: 1-based index of the failed batch.
        total_batches: Number of batches in the run.
        reason: ``"parse"``, ``"network"`` or ``"generation"``.
        attempts: Number of calls made for the batch.
    """

    def __init__(
        self,
        batch_index: int,
        total_batches: int,
        reason: str,
        attempts: int,
        detail: str = "",
    ) -> None:
        message = (
            f"Batch {batch_index}/{total_batches} analysis failed "
            f"({reason}) after {attempts} attempt(s)"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.batch_index = batch_index
        self.total_batches = total_batches
        self.reason = reason
        self.attempts = attempts

    def to_dict(self) -> dict[str, int | str]:
        """camelCase details for API responses and job status."""
        return {
            "batchIndex": self.batch_index,
            "totalBatches": self.total_batches,
            "reason": self.reason,
            "attempts": self.attempts,
        }


class NoTranscriptsError(CreatorVoiceError):
    """No video in the catalog could be transcribed."""

    pass


class PipelineCancelled(CreatorVoiceError):
    """The run was cancelled before it completed."""

    pass


class HandoffError(CreatorVoiceError):
    """Handing the combined analysis to the persistence service failed."""

    pass


class PipelineError(CreatorVoiceError):
    """Pipeline execution failed."""

    pass
