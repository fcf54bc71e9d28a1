"""HTTP clients for the scrape and transcribe services."""

import logging
from typing import Any

import httpx

from creatorvoice.errors import ScrapeError, TranscriptionError
from creatorvoice.services.interfaces import ScrapeResult

logger = logging.getLogger(__name__)


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text[:500]


class HttpTranscriber:
    """Client for a transcribe-from-url endpoint.

    Request body is ``{"videoUrl": ...}``; a successful response carries
    ``{"success": true, "transcript": "..."}``.
    """

    def __init__(self, endpoint: str, timeout: float = 60.0) -> None:
        """Initialize the client.

        Args:
            endpoint: Full URL of the transcribe endpoint.
            timeout: HTTP request timeout in seconds.
        """
        self.endpoint = endpoint
        self.timeout = timeout

    async def transcribe(self, media_url: str) -> str:
        """Transcribe the media at ``media_url``.

        Raises:
            TranscriptionError: On transport errors, non-200 responses or an
                empty transcript.
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.endpoint, json={"videoUrl": media_url})
            except httpx.RequestError as e:
                raise TranscriptionError(f"Failed to reach transcription service: {e}") from e

        if response.status_code != 200:
            raise TranscriptionError(
                f"Transcription service returned {response.status_code}: {_error_text(response)}"
            )

        try:
            data: Any = response.json()
        except ValueError as e:
            raise TranscriptionError("Transcription service returned invalid JSON") from e

        if not isinstance(data, dict):
            raise TranscriptionError("Transcription service returned an unexpected payload")

        transcript = data.get("transcript")
        if data.get("success") is False or not isinstance(transcript, str) or not transcript.strip():
            raise TranscriptionError(
                f"Transcription produced no text: {data.get('error', 'empty transcript')}"
            )
        return transcript.strip()


class HttpScraper:
    """Client for a media scrape endpoint.

    Request body is ``{"url": ..., "preferAudioOnly": bool}``; the response
    carries ``downloadUrl`` and optionally ``audioUrl``, ``title`` and
    ``thumbnailUrl``, either at the top level or under ``data``.
    """

    def __init__(self, endpoint: str, timeout: float = 30.0) -> None:
        self.endpoint = endpoint
        self.timeout = timeout

    async def scrape(self, url: str, prefer_audio_only: bool = True) -> ScrapeResult:
        """Scrape fresh media URLs for ``url``.

        Raises:
            ScrapeError: On transport errors, non-200 responses or a response
                with no media URL.
        """
        payload = {"url": url, "preferAudioOnly": prefer_audio_only}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.endpoint, json=payload)
            except httpx.RequestError as e:
                raise ScrapeError(f"Failed to reach scrape service: {e}") from e

        if response.status_code != 200:
            raise ScrapeError(
                f"Scrape service returned {response.status_code}: {_error_text(response)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ScrapeError("Scrape service returned invalid JSON") from e

        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict):
            raise ScrapeError("Scrape service returned an unexpected payload")

        result = ScrapeResult(
            download_url=data.get("downloadUrl"),
            audio_url=data.get("audioUrl"),
            title=data.get("title"),
            thumbnail_url=data.get("thumbnailUrl"),
        )
        if not result.media_url(prefer_audio_only):
            raise ScrapeError(f"Scrape returned no media URL for {url}")

        logger.debug("Scraped %s -> %s", url, result.media_url(prefer_audio_only))
        return result
