"""Tests for the bounded-concurrency transcription scheduler."""

import asyncio

import pytest

from conftest import FakeScraper, FakeTranscriber, tiktok_url, tiktok_video
from creatorvoice.errors import PipelineCancelled
from creatorvoice.models.catalog import VideoDescriptor
from creatorvoice.services.interfaces import ScrapeResult
from creatorvoice.services.media_resolver import MediaResolver
from creatorvoice.services.transcription import TranscriptionScheduler


def _catalog(n: int) -> list[VideoDescriptor]:
    return [tiktok_video(f"v{i}") for i in range(n)]


class TestTranscriptionScheduler:
    @pytest.mark.asyncio
    async def test_unresolvable_video_is_skipped_in_order(self) -> None:
        catalog = _catalog(5)
        catalog[2] = VideoDescriptor(id="v2", caption="no links")
        transcriber = FakeTranscriber(delay=0.01)
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)

        results = await scheduler.run(catalog, concurrency=2)

        assert [r.source_index for r in results] == [0, 1, 3, 4]
        assert [r.video_id for r in results] == ["v0", "v1", "v3", "v4"]
        assert results[0].text == f"transcript of {tiktok_url('v0')}"
        assert len(transcriber.calls) == 4

    @pytest.mark.asyncio
    async def test_order_preserved_with_uneven_latency(self) -> None:
        class SlowFirst(FakeTranscriber):
            async def transcribe(self, media_url: str) -> str:
                if media_url.endswith("/v0"):
                    await asyncio.sleep(0.05)
                return await super().transcribe(media_url)

        scheduler = TranscriptionScheduler(MediaResolver(), SlowFirst())
        results = await scheduler.run(_catalog(6), concurrency=3)

        assert [r.source_index for r in results] == list(range(6))

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        transcriber = FakeTranscriber(delay=0.01)
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)

        await scheduler.run(_catalog(8), concurrency=3)

        assert transcriber.max_in_flight <= 3
        assert len(transcriber.calls) == 8

    @pytest.mark.asyncio
    async def test_each_video_claimed_once(self) -> None:
        transcriber = FakeTranscriber()
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)

        await scheduler.run(_catalog(7), concurrency=4)

        assert sorted(transcriber.calls) == sorted(tiktok_url(f"v{i}") for i in range(7))

    @pytest.mark.asyncio
    async def test_failures_and_empty_text_are_skipped(self) -> None:
        transcriber = FakeTranscriber(
            fail_urls={tiktok_url("v1")}, empty_urls={tiktok_url("v3")}
        )
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)

        results = await scheduler.run(_catalog(5), concurrency=2)

        assert [r.source_index for r in results] == [0, 2, 4]

    @pytest.mark.asyncio
    async def test_empty_catalog(self) -> None:
        scheduler = TranscriptionScheduler(MediaResolver(), FakeTranscriber())
        assert await scheduler.run([], concurrency=2) == []

    @pytest.mark.asyncio
    async def test_all_fail_returns_empty(self) -> None:
        catalog = _catalog(3)
        transcriber = FakeTranscriber(fail_urls={tiktok_url(d.id) for d in catalog})
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)

        assert await scheduler.run(catalog, concurrency=2) == []

    @pytest.mark.asyncio
    async def test_scraped_audio_url_preferred(self) -> None:
        page = tiktok_url("v0")
        scraper = FakeScraper(
            {
                page: ScrapeResult(
                    download_url="https://cdn.example.com/v0.mp4",
                    audio_url="https://cdn.example.com/v0.m4a",
                    title="My video",
                )
            }
        )
        transcriber = FakeTranscriber()
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber, scraper=scraper)

        results = await scheduler.run(_catalog(1), concurrency=1)

        assert transcriber.calls == ["https://cdn.example.com/v0.m4a"]
        assert scraper.calls == [(page, True)]
        assert results[0].resolved_url == "https://cdn.example.com/v0.m4a"
        assert results[0].source_url == page
        assert results[0].title == "My video"

    @pytest.mark.asyncio
    async def test_scraped_download_url_without_audio_preference(self) -> None:
        page = tiktok_url("v0")
        scraper = FakeScraper(
            {
                page: ScrapeResult(
                    download_url="https://cdn.example.com/v0.mp4",
                    audio_url="https://cdn.example.com/v0.m4a",
                )
            }
        )
        transcriber = FakeTranscriber()
        scheduler = TranscriptionScheduler(
            MediaResolver(), transcriber, scraper=scraper, prefer_audio_only=False
        )

        await scheduler.run(_catalog(1), concurrency=1)

        assert transcriber.calls == ["https://cdn.example.com/v0.mp4"]

    @pytest.mark.asyncio
    async def test_scrape_failure_falls_back_to_resolved_url(self) -> None:
        transcriber = FakeTranscriber()
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber, scraper=FakeScraper())

        results = await scheduler.run(_catalog(2), concurrency=2)

        assert [r.resolved_url for r in results] == [tiktok_url("v0"), tiktok_url("v1")]
        assert all(r.source_url is None for r in results)

    @pytest.mark.asyncio
    async def test_timeout_skips_video(self) -> None:
        class Hanging(FakeTranscriber):
            async def transcribe(self, media_url: str) -> str:
                if media_url.endswith("/v1"):
                    await asyncio.sleep(10)
                return await super().transcribe(media_url)

        scheduler = TranscriptionScheduler(MediaResolver(), Hanging(), call_timeout=0.05)
        results = await scheduler.run(_catalog(3), concurrency=3)

        assert [r.source_index for r in results] == [0, 2]

    @pytest.mark.asyncio
    async def test_cancel_before_run(self) -> None:
        transcriber = FakeTranscriber()
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(PipelineCancelled):
            await scheduler.run(_catalog(3), concurrency=2, cancel_event=cancel)
        assert transcriber.calls == []

    @pytest.mark.asyncio
    async def test_cancel_abandons_in_flight_calls(self) -> None:
        transcriber = FakeTranscriber(delay=10)
        scheduler = TranscriptionScheduler(MediaResolver(), transcriber)
        cancel = asyncio.Event()

        async def cancel_soon() -> None:
            await asyncio.sleep(0.05)
            cancel.set()

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(PipelineCancelled):
            await asyncio.wait_for(
                scheduler.run(_catalog(6), concurrency=2, cancel_event=cancel), timeout=2
            )
        await canceller
        assert len(transcriber.calls) == 2
