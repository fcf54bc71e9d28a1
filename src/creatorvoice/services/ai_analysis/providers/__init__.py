"""JSON generation providers."""

from creatorvoice.services.ai_analysis.providers.claude import ClaudeJSONGenerator
from creatorvoice.services.ai_analysis.providers.http import HttpJSONGenerator

__all__ = ["ClaudeJSONGenerator", "HttpJSONGenerator"]
