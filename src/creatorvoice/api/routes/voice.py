"""Synchronous voice analysis endpoint."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException

from creatorvoice.api.deps import get_pipeline_factory, get_settings
from creatorvoice.api.schemas import AnalyzeBatchRequest, AnalyzeBatchResponse
from creatorvoice.config import Settings
from creatorvoice.errors import BatchAnalysisFailure, PipelineError
from creatorvoice.pipeline.runner import VoiceAnalysisPipeline

router = APIRouter(prefix="/api/v1/voice", tags=["voice"])


@router.post("/analyze-batch", response_model=AnalyzeBatchResponse)
async def analyze_batch(
    req: AnalyzeBatchRequest,
    settings: Settings = Depends(get_settings),
    factory: Callable[..., VoiceAnalysisPipeline] = Depends(get_pipeline_factory),
) -> AnalyzeBatchResponse:
    texts = [t for t in req.transcripts if t.strip()]
    if not texts:
        raise HTTPException(status_code=400, detail="No transcripts provided")

    try:
        options = settings.pipeline_options(**req.overrides())
        pipeline = factory(options)
    except PipelineError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    run = await pipeline.analyze_transcripts(texts)
    if not run.ok or run.analysis is None:
        if isinstance(run.error, BatchAnalysisFailure):
            raise HTTPException(
                status_code=502,
                detail={"error": str(run.error), **run.error.to_dict()},
            )
        raise HTTPException(status_code=500, detail=str(run.error))

    return AnalyzeBatchResponse(
        analysis=run.analysis.to_json_dict(),
        meta=run.meta.to_json_dict(),
    )
