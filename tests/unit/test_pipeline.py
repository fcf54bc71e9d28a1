"""End-to-end tests for the voice analysis pipeline with in-memory collaborators."""

import asyncio

import pytest

from conftest import (
    EchoGenerator,
    FakeScraper,
    FakeTranscriber,
    ScriptedGenerator,
    fragment_json,
    tiktok_url,
    tiktok_video,
)
from creatorvoice.errors import (
    BatchAnalysisFailure,
    NoTranscriptsError,
    PipelineCancelled,
    PipelineError,
)
from creatorvoice.models.catalog import VideoDescriptor
from creatorvoice.models.pipeline import PipelineOptions, RunStatus, StageStatus
from creatorvoice.pipeline import PipelineExecutor, VoiceAnalysisPipeline
from creatorvoice.pipeline.context import PipelineContext
from creatorvoice.services.media_resolver import MediaResolver


def _pipeline(
    options: PipelineOptions,
    generator=None,
    transcriber=None,
    scraper=None,
) -> VoiceAnalysisPipeline:
    return VoiceAnalysisPipeline(
        options=options,
        resolver=MediaResolver(),
        transcriber=transcriber or FakeTranscriber(),
        generator=generator or EchoGenerator(),
        scraper=scraper,
    )


class TestVoiceAnalysisPipeline:
    @pytest.mark.asyncio
    async def test_full_run(self, fast_options: PipelineOptions) -> None:
        catalog = [tiktok_video(f"v{i}") for i in range(12)]
        generator = EchoGenerator()
        pipeline = _pipeline(fast_options, generator=generator)

        result = await pipeline.run(catalog)

        assert result.ok
        assert result.status == RunStatus.SUCCESS
        analysis = result.unwrap()
        assert [h.source_index for h in analysis.templates.hooks] == list(range(1, 13))
        assert [t.index for t in analysis.transcripts] == list(range(1, 13))
        assert analysis.style_signature.tone == "Energetic"
        assert len(generator.requests) == 3
        assert result.meta.total_transcripts == 12
        assert result.meta.batches_processed == 3
        assert result.meta.batch_size == 5
        assert set(result.stage_results) == {"transcription", "batch_analysis", "merge"}
        assert all(r.status == StageStatus.COMPLETED for r in result.stage_results.values())
        assert all(r.elapsed_sec is not None for r in result.stage_results.values())

    @pytest.mark.asyncio
    async def test_skipped_videos_shift_global_indices(self, fast_options: PipelineOptions) -> None:
        catalog = [tiktok_video(f"v{i}") for i in range(6)]
        catalog[1] = VideoDescriptor(id="v1")
        pipeline = _pipeline(fast_options)

        result = await pipeline.run(catalog)

        assert result.ok
        assert [t.video_id for t in result.transcripts] == ["v0", "v2", "v3", "v4", "v5"]
        assert len(result.analysis.templates.hooks) == 5

    @pytest.mark.asyncio
    async def test_max_videos_cap_after_exclusion(self) -> None:
        options = PipelineOptions(max_videos=3, parse_retry_delay=0.0)
        catalog = [tiktok_video(f"v{i}") for i in range(6)]
        transcriber = FakeTranscriber()
        pipeline = _pipeline(options, transcriber=transcriber)

        result = await pipeline.run(catalog, exclude_video_ids=["v0", "v2"])

        assert result.ok
        assert [t.video_id for t in result.transcripts] == ["v1", "v3", "v4"]
        assert len(transcriber.calls) == 3

    @pytest.mark.asyncio
    async def test_scraper_disabled_by_option(self) -> None:
        options = PipelineOptions(use_scrape=False, parse_retry_delay=0.0)
        scraper = FakeScraper()
        pipeline = _pipeline(options, scraper=scraper)

        result = await pipeline.run([tiktok_video("v0")])

        assert result.ok
        assert scraper.calls == []

    @pytest.mark.asyncio
    async def test_batch_failure_carries_no_analysis(self, fast_options: PipelineOptions) -> None:
        catalog = [tiktok_video(f"v{i}") for i in range(12)]
        generator = ScriptedGenerator([fragment_json(5), "x", "y", "z"])
        pipeline = _pipeline(fast_options, generator=generator)

        result = await pipeline.run(catalog)

        assert not result.ok
        assert result.status == RunStatus.FAILURE
        assert result.analysis is None
        assert result.failed_stage == "batch_analysis"
        assert isinstance(result.error, BatchAnalysisFailure)
        assert result.error.batch_index == 2
        assert result.stage_results["merge"].status == StageStatus.SKIPPED
        assert len(result.transcripts) == 12
        with pytest.raises(BatchAnalysisFailure):
            result.unwrap()

    @pytest.mark.asyncio
    async def test_unexpected_generator_error_is_batch_failure(
        self, fast_options: PipelineOptions
    ) -> None:
        generator = ScriptedGenerator([fragment_json(5), KeyError("content")])
        pipeline = _pipeline(fast_options, generator=generator)

        result = await pipeline.analyze_transcripts([f"text {i}" for i in range(7)])

        assert result.failed_stage == "batch_analysis"
        assert isinstance(result.error, BatchAnalysisFailure)
        assert result.error.to_dict()["batchIndex"] == 2

    @pytest.mark.asyncio
    async def test_no_transcripts(self, fast_options: PipelineOptions) -> None:
        catalog = [VideoDescriptor(id="a"), VideoDescriptor(id="b")]
        generator = EchoGenerator()
        pipeline = _pipeline(fast_options, generator=generator)

        result = await pipeline.run(catalog)

        assert result.failed_stage == "transcription"
        assert isinstance(result.error, NoTranscriptsError)
        assert generator.requests == []

    @pytest.mark.asyncio
    async def test_cancelled_run(self, fast_options: PipelineOptions) -> None:
        cancel = asyncio.Event()
        cancel.set()
        pipeline = _pipeline(fast_options)

        result = await pipeline.run([tiktok_video("v0")], cancel_event=cancel)

        assert not result.ok
        assert isinstance(result.error, PipelineCancelled)

    @pytest.mark.asyncio
    async def test_analyze_transcripts(self, fast_options: PipelineOptions) -> None:
        generator = EchoGenerator()
        pipeline = _pipeline(fast_options, generator=generator)

        result = await pipeline.analyze_transcripts(
            [f"text {i}" for i in range(7)] + ["   "]
        )

        assert result.ok
        assert result.meta.total_transcripts == 7
        assert result.meta.batches_processed == 2
        assert [h.source_index for h in result.analysis.templates.hooks] == list(range(1, 8))
        assert "transcription" not in result.stage_results

    @pytest.mark.asyncio
    async def test_analyze_no_transcripts(self, fast_options: PipelineOptions) -> None:
        result = await _pipeline(fast_options).analyze_transcripts([])

        assert result.failed_stage == "batch_analysis"
        assert isinstance(result.error, NoTranscriptsError)

    @pytest.mark.asyncio
    async def test_progress_reported(self, fast_options: PipelineOptions) -> None:
        events: list[tuple[str, StageStatus, float]] = []
        pipeline = _pipeline(fast_options)

        await pipeline.run(
            [tiktok_video("v0"), tiktok_video("v1")],
            progress_callback=lambda s, st, p: events.append((s, st, p)),
        )

        assert events[0] == ("transcription", StageStatus.RUNNING, 0.0)
        assert events[-1] == ("merge", StageStatus.COMPLETED, 1.0)


class TestPipelineExecutor:
    @pytest.mark.asyncio
    async def test_unknown_stage_fails(self, fast_options: PipelineOptions) -> None:
        executor = PipelineExecutor()
        context = PipelineContext(options=fast_options)

        results = await executor.execute(context, ["nope"])

        assert results["nope"].status == StageStatus.FAILED
        assert isinstance(results["nope"].error, PipelineError)

    @pytest.mark.asyncio
    async def test_merge_validation_failure_stops(self, fast_options: PipelineOptions) -> None:
        from creatorvoice.pipeline.stages import MergeStage

        executor = PipelineExecutor()
        executor.register_stage(MergeStage())
        context = PipelineContext(options=fast_options)

        results = await executor.execute(context, ["merge"])

        assert results["merge"].status == StageStatus.FAILED
        assert results["merge"].message == "Validation failed"
        assert context.analysis is None

    @pytest.mark.asyncio
    async def test_merge_requires_matching_batch_sizes(
        self, fast_options: PipelineOptions
    ) -> None:
        from creatorvoice.models.analysis import AnalysisFragment
        from creatorvoice.pipeline.stages import MergeStage

        stage = MergeStage()
        context = PipelineContext(
            options=fast_options, fragments=[AnalysisFragment()], batch_sizes=[]
        )
        assert stage.requires == ("fragments", "batch_sizes")
        assert not await stage.validate(context)

        context.batch_sizes = [1]
        assert await stage.validate(context)

    @pytest.mark.asyncio
    async def test_stage_checks_cancel_before_work(self, fast_options: PipelineOptions) -> None:
        generator = EchoGenerator()
        cancel = asyncio.Event()
        cancel.set()

        result = await _pipeline(fast_options, generator=generator).analyze_transcripts(
            ["one"], cancel_event=cancel
        )

        assert result.failed_stage == "batch_analysis"
        assert isinstance(result.error, PipelineCancelled)
        assert "batch_analysis" in str(result.error)
        assert generator.requests == []

    @pytest.mark.asyncio
    async def test_stage_output_lives_on_typed_fields(
        self, fast_options: PipelineOptions
    ) -> None:
        pipeline = _pipeline(fast_options)

        result = await pipeline.analyze_transcripts(["one", "two"])

        assert result.ok
        assert set(PipelineContext.model_fields) == {
            "options",
            "descriptors",
            "transcripts",
            "fragments",
            "batch_sizes",
            "analysis",
            "cancel_event",
        }
        assert not hasattr(PipelineExecutor, "get_stage")

    def test_list_stages(self) -> None:
        pipeline = _pipeline(PipelineOptions())
        names = [name for name, _ in pipeline._executor.list_stages()]
        assert names == ["transcription", "batch_analysis", "merge"]

    @pytest.mark.asyncio
    async def test_end_to_end_urls(self, fast_options: PipelineOptions) -> None:
        transcriber = FakeTranscriber()
        pipeline = _pipeline(fast_options, transcriber=transcriber)

        result = await pipeline.run([tiktok_video("v9", handle="@someone")])

        assert transcriber.calls == [tiktok_url("v9", handle="someone")]
        assert result.transcripts[0].resolved_url == tiktok_url("v9", handle="someone")
