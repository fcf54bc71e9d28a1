"""Collaborator interfaces (Protocols) for creatorvoice.

The pipeline only talks to scraping, transcription, generation and
persistence services through these contracts, so tests and alternative
backends can be swapped in freely.
"""

import json
from typing import Any, Protocol

from pydantic import BaseModel, Field


class ScrapeResult(BaseModel):
    """Fresh media URLs returned by a scraper."""

    download_url: str | None = Field(None, description="Direct video URL")
    audio_url: str | None = Field(None, description="Audio-only URL, when available")
    title: str | None = None
    thumbnail_url: str | None = None

    def media_url(self, prefer_audio_only: bool) -> str | None:
        """Pick the URL to transcribe."""
        if prefer_audio_only and self.audio_url:
            return self.audio_url
        return self.download_url or self.audio_url


class GenerationRequest(BaseModel):
    """One structured-JSON generation call."""

    prompt: str
    system_prompt: str
    temperature: float
    max_tokens: int
    model: str


class GenerationResponse(BaseModel):
    """Raw text returned by a generation call."""

    text: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class AnalysisHandoff(BaseModel):
    """Document handed to the persistence/persona service after a run."""

    creator: dict[str, Any] = Field(default_factory=dict)
    analysis_json: dict[str, Any]
    transcripts_count: int
    video_meta: list[dict[str, Any]] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "creator": self.creator,
            "analysisJson": self.analysis_json,
            "analysisText": json.dumps(self.analysis_json, ensure_ascii=False),
            "transcriptsCount": self.transcripts_count,
            "videoMeta": self.video_meta,
        }


class IScraper(Protocol):
    """Interface for resolving a page URL into fresh media URLs."""

    async def scrape(self, url: str, prefer_audio_only: bool = True) -> ScrapeResult:
        """Scrape a video page.

        Args:
            url: Permalink or raw media URL.
            prefer_audio_only: Ask for an audio-only rendition.

        Returns:
            ScrapeResult with at least one media URL.

        Raises:
            ScrapeError: If the page cannot be scraped.
        """
        ...


class ITranscriber(Protocol):
    """Interface for speech-to-text over a media URL."""

    async def transcribe(self, media_url: str) -> str:
        """Transcribe the media at ``media_url``.

        Returns:
            Non-empty transcript text.

        Raises:
            TranscriptionError: If transcription fails or yields no text.
        """
        ...


class IJSONGenerator(Protocol):
    """Interface for the structured-JSON text generation service."""

    async def generate_json(self, request: GenerationRequest) -> GenerationResponse:
        """Run one generation call.

        Raises:
            TransientNetworkError: Timeout or gateway-class failure.
            GenerationError: Any other failure.
        """
        ...

    @property
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @property
    def is_available(self) -> bool:
        """Whether this provider is currently available."""
        ...


class IAnalysisSink(Protocol):
    """Interface for the downstream persistence/persona service."""

    async def deliver(self, handoff: AnalysisHandoff) -> dict[str, Any]:
        """Hand off a combined analysis.

        Raises:
            HandoffError: If the service rejects the document.
        """
        ...
