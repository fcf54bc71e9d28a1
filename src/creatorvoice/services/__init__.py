"""Services module for creatorvoice."""

from creatorvoice.services.interfaces import (
    AnalysisHandoff,
    GenerationRequest,
    GenerationResponse,
    IAnalysisSink,
    IJSONGenerator,
    IScraper,
    ITranscriber,
    ScrapeResult,
)
from creatorvoice.services.media_resolver import MediaResolver

__all__ = [
    "IScraper",
    "ITranscriber",
    "IJSONGenerator",
    "IAnalysisSink",
    "ScrapeResult",
    "GenerationRequest",
    "GenerationResponse",
    "AnalysisHandoff",
    "MediaResolver",
]
