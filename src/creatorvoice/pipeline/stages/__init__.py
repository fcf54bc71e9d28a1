"""Pipeline stages module.

Available stages:
- TranscriptionStage: Catalog transcription with a bounded worker pool
- BatchAnalysisStage: Sequential batched template/style extraction
- MergeStage: Offset-correct merge of batch fragments
"""

from creatorvoice.pipeline.stages.analysis import BatchAnalysisStage
from creatorvoice.pipeline.stages.merge import MergeStage
from creatorvoice.pipeline.stages.transcription import TranscriptionStage

__all__ = [
    "TranscriptionStage",
    "BatchAnalysisStage",
    "MergeStage",
]
