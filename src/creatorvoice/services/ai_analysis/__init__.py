"""Batched voice analysis: prompting, decoding, retrying and merging."""

from creatorvoice.services.ai_analysis.coordinator import (
    BatchAnalysisCoordinator,
    chunk_transcripts,
)
from creatorvoice.services.ai_analysis.json_decoder import decode_json_object, strip_code_fences
from creatorvoice.services.ai_analysis.merger import FragmentMerger
from creatorvoice.services.ai_analysis.prompts import SYSTEM_PROMPT, build_batch_prompt

__all__ = [
    "BatchAnalysisCoordinator",
    "FragmentMerger",
    "SYSTEM_PROMPT",
    "build_batch_prompt",
    "chunk_transcripts",
    "decode_json_object",
    "strip_code_fences",
]
