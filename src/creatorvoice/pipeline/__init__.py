"""Pipeline module for creatorvoice."""

from creatorvoice.pipeline.base import PipelineStage
from creatorvoice.pipeline.context import PipelineContext
from creatorvoice.pipeline.executor import PipelineExecutor
from creatorvoice.pipeline.runner import VoiceAnalysisPipeline

__all__ = ["PipelineStage", "PipelineContext", "PipelineExecutor", "VoiceAnalysisPipeline"]
