"""Shared fakes for the collaborator protocols."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import pytest

from creatorvoice.errors import ScrapeError, TranscriptionError
from creatorvoice.models.catalog import Platform, VideoDescriptor
from creatorvoice.models.pipeline import PipelineOptions
from creatorvoice.services.interfaces import (
    AnalysisHandoff,
    GenerationRequest,
    GenerationResponse,
    ScrapeResult,
)


class FakeTranscriber:
    """Returns "transcript of <url>" unless the URL is marked as failing."""

    def __init__(
        self,
        fail_urls: set[str] | None = None,
        empty_urls: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.fail_urls = fail_urls or set()
        self.empty_urls = empty_urls or set()
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def transcribe(self, media_url: str) -> str:
        self.calls.append(media_url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if media_url in self.fail_urls:
            raise TranscriptionError(f"cannot transcribe {media_url}")
        if media_url in self.empty_urls:
            return "   "
        return f"transcript of {media_url}"


class FakeScraper:
    """Maps page URLs to fresh media URLs; unknown URLs fail."""

    def __init__(self, mapping: dict[str, ScrapeResult] | None = None) -> None:
        self.mapping = mapping or {}
        self.calls: list[tuple[str, bool]] = []

    async def scrape(self, url: str, prefer_audio_only: bool = True) -> ScrapeResult:
        self.calls.append((url, prefer_audio_only))
        if url not in self.mapping:
            raise ScrapeError(f"no media for {url}")
        return self.mapping[url]


class ScriptedGenerator:
    """Plays back a script of responses; Exceptions in the script are raised."""

    def __init__(self, script: list[str | Exception]) -> None:
        self.script = list(script)
        self.requests: list[GenerationRequest] = []

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def is_available(self) -> bool:
        return True

    async def generate_json(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        if not self.script:
            raise AssertionError("generator called more times than scripted")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return GenerationResponse(text=item)


class EchoGenerator(ScriptedGenerator):
    """Answers every request with a valid fragment sized to the prompt."""

    def __init__(self, tone: str = "Energetic") -> None:
        super().__init__([])
        self.tone = tone

    async def generate_json(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        count = max(int(n) for n in re.findall(r"\[INSERT TRANSCRIPT (\d+)\]", request.prompt))
        return GenerationResponse(text=fragment_json(count, tone=self.tone))


class RecordingSink:
    def __init__(self, fail: Exception | None = None) -> None:
        self.fail = fail
        self.delivered: list[AnalysisHandoff] = []

    async def deliver(self, handoff: AnalysisHandoff) -> dict[str, Any]:
        if self.fail is not None:
            raise self.fail
        self.delivered.append(handoff)
        return {"success": True, "id": "analysis-1"}


def fragment_dict(
    count: int,
    tone: str = "Energetic",
    power_words: list[str] | None = None,
    avg: float | None = 10.0,
    hook_pattern: str = "I [achievement] in [timeframe]",
) -> dict[str, Any]:
    """A valid analysis fragment for a batch of ``count`` transcripts."""
    def items(prefix: str) -> list[dict[str, Any]]:
        return [
            {"pattern": f"{prefix} {i}", "variables": ["x"], "sourceIndex": i}
            for i in range(1, count + 1)
        ]

    return {
        "templates": {
            "hooks": [
                {"pattern": hook_pattern, "variables": ["achievement", "timeframe"], "sourceIndex": i}
                for i in range(1, count + 1)
            ],
            "bridges": items("bridge"),
            "ctas": items("cta"),
            "nuggets": [
                {"pattern": f"nugget {i}", "structure": "list", "variables": [], "sourceIndex": i}
                for i in range(1, count + 1)
            ],
        },
        "styleSignature": {
            "powerWords": power_words if power_words is not None else ["bold"],
            "fillerPhrases": ["you know"],
            "transitionPhrases": ["so"],
            "avgWordsPerSentence": avg,
            "tone": tone,
        },
        "transcripts": [
            {"index": i, "hook": {"text": f"hook {i}"}, "microHooks": []}
            for i in range(1, count + 1)
        ],
    }


def fragment_json(count: int, **kwargs: Any) -> str:
    return json.dumps(fragment_dict(count, **kwargs))


def tiktok_video(video_id: str, handle: str = "creator") -> VideoDescriptor:
    return VideoDescriptor(id=video_id, platform=Platform.TIKTOK, handle=handle)


def tiktok_url(video_id: str, handle: str = "creator") -> str:
    return f"https://www.tiktok.com/@{handle}/video/{video_id}"


@pytest.fixture
def fast_options() -> PipelineOptions:
    return PipelineOptions(
        worker_concurrency=2,
        batch_size=5,
        retry_budget=2,
        parse_retry_delay=0.0,
        network_retry_delay=0.0,
        call_timeout=5.0,
    )
