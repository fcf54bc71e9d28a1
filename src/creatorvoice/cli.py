"""creatorvoice command-line interface with subcommands.

Usage:
    creatorvoice analyze <catalog.json> [--handle NAME] [--platform tiktok] [-o analysis.json]
    creatorvoice analyze-transcripts <transcripts.json> [-o analysis.json]
    creatorvoice serve [--host 0.0.0.0] [--port 8000]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from creatorvoice.config import settings
from creatorvoice.errors import BatchAnalysisFailure, CreatorVoiceError
from creatorvoice.models.catalog import Platform, VideoDescriptor
from creatorvoice.models.pipeline import PipelineOptions, PipelineRunResult, StageStatus
from creatorvoice.pipeline.factory import create_pipeline


def _load_json(path_str: str, label: str) -> Any:
    path = Path(path_str).resolve()
    if not path.exists():
        print(f"Error: {label} not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: {label} is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)


def _options_from_args(args: argparse.Namespace) -> PipelineOptions:
    try:
        return _build_options(args)
    except ValidationError as e:
        print(f"Error: invalid option: {_first_error(e)}", file=sys.stderr)
        sys.exit(1)


def _first_error(error: ValidationError) -> str:
    detail = error.errors()[0]
    location = ".".join(str(part) for part in detail["loc"])
    return f"{location}: {detail['msg']}" if location else detail["msg"]


def _build_options(args: argparse.Namespace) -> PipelineOptions:
    return settings.pipeline_options(
        max_videos=getattr(args, "max_videos", None),
        worker_concurrency=getattr(args, "workers", None),
        batch_size=args.batch_size,
        retry_budget=args.retries,
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        use_scrape=False if getattr(args, "no_scrape", False) else None,
    )


def _progress(stage_name: str, status: StageStatus, progress: float) -> None:
    bar_width = 30
    filled = int(bar_width * progress)
    bar = "=" * filled + "-" * (bar_width - filled)
    print(f"\r  [{bar}] {progress*100:.0f}% {stage_name} ({status.value})", end="", flush=True)


def _report(run: PipelineRunResult, output: str | None) -> None:
    """Print a run summary, write the analysis, exit 1 on failure."""
    print()  # newline after progress bar

    if not run.ok or run.analysis is None:
        error = run.error
        if isinstance(error, BatchAnalysisFailure):
            print(
                f"Error: batch {error.batch_index} of {error.total_batches} failed "
                f"({error.reason}, {error.attempts} attempt(s))",
                file=sys.stderr,
            )
        print(f"Failed at stage '{run.failed_stage}': {error}", file=sys.stderr)
        sys.exit(1)

    analysis = run.analysis
    data = {
        "analysis": analysis.to_json_dict(),
        "meta": run.meta.to_json_dict(),
    }

    print("\nDone!")
    print(f"  Transcripts: {run.meta.total_transcripts}")
    print(f"  Batches: {run.meta.batches_processed}")
    for name, count in analysis.template_counts.items():
        print(f"  {name}: {count}")
    print(f"  Tone: {analysis.style_signature.tone}")

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        print(f"\nSaved: {output_path}")
    else:
        print(json.dumps(data, ensure_ascii=False, indent=2))


# --- Analyze subcommand ---

async def cmd_analyze(args: argparse.Namespace) -> None:
    """Run the full catalog pipeline."""
    raw = _load_json(args.input, "catalog")
    videos = raw.get("videos", []) if isinstance(raw, dict) else raw
    if not isinstance(videos, list) or not videos:
        print("Error: catalog contains no videos", file=sys.stderr)
        sys.exit(1)

    descriptors: list[VideoDescriptor] = []
    for position, entry in enumerate(videos, start=1):
        try:
            descriptors.append(VideoDescriptor.model_validate(entry))
        except ValidationError as e:
            print(
                f"Error: catalog entry {position} is invalid: {_first_error(e)}",
                file=sys.stderr,
            )
            sys.exit(1)
    exclude: list[str] = []
    if args.exclude:
        exclude = [v.strip() for v in args.exclude.split(",") if v.strip()]

    try:
        pipeline = create_pipeline(
            settings,
            _options_from_args(args),
            default_handle=args.handle,
            default_platform=Platform(args.platform),
        )
    except CreatorVoiceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Voice analysis started: {len(descriptors)} video(s)")
    print(f"  Workers: {pipeline.options.worker_concurrency}")
    print(f"  Batch size: {pipeline.options.batch_size}")
    print(f"  Model: {pipeline.options.model}")

    run = await pipeline.run(
        descriptors, exclude_video_ids=exclude, progress_callback=_progress
    )
    _report(run, args.output)


# --- Analyze-transcripts subcommand ---

async def cmd_analyze_transcripts(args: argparse.Namespace) -> None:
    """Run batch analysis and merge over existing transcripts."""
    raw = _load_json(args.input, "transcripts file")
    texts = raw.get("transcripts", []) if isinstance(raw, dict) else raw
    if not isinstance(texts, list):
        print("Error: expected a list of transcripts", file=sys.stderr)
        sys.exit(1)
    texts = [t for t in texts if isinstance(t, str) and t.strip()]
    if not texts:
        print("Error: no transcripts provided", file=sys.stderr)
        sys.exit(1)

    try:
        pipeline = create_pipeline(settings, _options_from_args(args))
    except CreatorVoiceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Transcript analysis started: {len(texts)} transcript(s)")
    run = await pipeline.analyze_transcripts(texts, progress_callback=_progress)
    _report(run, args.output)


# --- Serve subcommand ---

def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run(
        "creatorvoice.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=settings.debug,
    )


# --- Main CLI ---

def _add_analysis_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-b", "--batch-size", type=int, help="Transcripts per batch")
    parser.add_argument("-r", "--retries", type=int, help="Extra attempts per batch")
    parser.add_argument("--model", type=str, help="Generation model")
    parser.add_argument("--temperature", type=float, help="Sampling temperature")
    parser.add_argument("--max-tokens", type=int, help="Max tokens per generation")
    parser.add_argument("-o", "--output", type=str, help="Output JSON path (default: stdout)")


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="creatorvoice",
        description="creatorvoice - creator voice analysis CLI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Transcribe and analyze a video catalog")
    p_analyze.add_argument("input", type=str, help="Catalog JSON (list or {\"videos\": [...]})")
    p_analyze.add_argument("--handle", type=str, help="Creator handle for TikTok URLs")
    p_analyze.add_argument(
        "--platform",
        choices=[p.value for p in Platform],
        default=Platform.UNKNOWN.value,
        help="Default platform (default: unknown)",
    )
    p_analyze.add_argument("--exclude", type=str, help="Comma-separated video ids to skip")
    p_analyze.add_argument("-n", "--max-videos", type=int, help="Catalog cap")
    p_analyze.add_argument("-w", "--workers", type=int, help="Transcription workers")
    p_analyze.add_argument("--no-scrape", action="store_true", help="Skip media URL refresh")
    _add_analysis_flags(p_analyze)

    # --- analyze-transcripts ---
    p_transcripts = subparsers.add_parser(
        "analyze-transcripts", help="Analyze transcripts you already have"
    )
    p_transcripts.add_argument(
        "input", type=str, help="Transcripts JSON (list or {\"transcripts\": [...]})"
    )
    _add_analysis_flags(p_transcripts)

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", type=str, help="Bind host")
    p_serve.add_argument("--port", type=int, help="Bind port")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Dispatch
    if args.command == "analyze":
        asyncio.run(cmd_analyze(args))
    elif args.command == "analyze-transcripts":
        asyncio.run(cmd_analyze_transcripts(args))
    elif args.command == "serve":
        cmd_serve(args)


if __name__ == "__main__":
    main()
