"""Data models for creatorvoice."""

from creatorvoice.models.analysis import (
    DEFAULT_TONE,
    TEMPLATE_CATEGORIES,
    AnalysisFragment,
    CombinedAnalysis,
    StyleSignature,
    TemplateItem,
    TemplateSet,
    TranscriptBreakdown,
)
from creatorvoice.models.catalog import Platform, TranscriptResult, VideoDescriptor
from creatorvoice.models.pipeline import (
    AnalysisMeta,
    PipelineOptions,
    PipelineRunResult,
    RunStatus,
    StageResult,
    StageStatus,
)

__all__ = [
    # Catalog
    "Platform",
    "VideoDescriptor",
    "TranscriptResult",
    # Analysis
    "DEFAULT_TONE",
    "TEMPLATE_CATEGORIES",
    "TemplateItem",
    "TemplateSet",
    "StyleSignature",
    "TranscriptBreakdown",
    "AnalysisFragment",
    "CombinedAnalysis",
    # Pipeline
    "StageStatus",
    "StageResult",
    "PipelineOptions",
    "AnalysisMeta",
    "RunStatus",
    "PipelineRunResult",
]
