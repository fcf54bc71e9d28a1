"""Pipeline execution context."""

import asyncio

from pydantic import BaseModel, ConfigDict, Field

from creatorvoice.models.analysis import AnalysisFragment, CombinedAnalysis
from creatorvoice.models.catalog import TranscriptResult, VideoDescriptor
from creatorvoice.models.pipeline import PipelineOptions


class PipelineContext(BaseModel):
    """Shared context for pipeline execution.

    This context is passed between stages and accumulates
    results as the pipeline progresses:
    descriptors -> transcripts -> fragments -> analysis.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    options: PipelineOptions = Field(..., description="Run configuration")
    descriptors: list[VideoDescriptor] = Field(
        default_factory=list, description="Catalog to transcribe"
    )
    transcripts: list[TranscriptResult] = Field(
        default_factory=list, description="Transcripts in catalog order"
    )
    fragments: list[AnalysisFragment] = Field(
        default_factory=list, description="One analysis fragment per batch"
    )
    batch_sizes: list[int] = Field(
        default_factory=list, description="Input transcript count of each batch"
    )
    analysis: CombinedAnalysis | None = Field(None, description="Merged analysis")
    cancel_event: asyncio.Event | None = Field(None, exclude=True)

    @property
    def transcript_texts(self) -> list[str]:
        return [t.text for t in self.transcripts]
