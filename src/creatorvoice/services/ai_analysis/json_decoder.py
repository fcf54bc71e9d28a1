"""Tolerant decoding of JSON objects from model output.

Three tiers are tried in order, stopping at the first that yields a JSON
object:

1. the raw text;
2. the text with markdown code fences removed (fence content is kept);
3. the slice from the first ``{`` to the last ``}`` of the tier-2 text.
"""

import json
import re
from typing import Any

from creatorvoice.errors import ParseError

# ```json\n ... \n```  ->  ...
_CLOSED_FENCE = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)
# Opening fence of a truncated response
_DANGLING_FENCE = re.compile(r"^[ \t]*```[\w+-]*[ \t]*$", re.MULTILINE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences, keeping what they enclose."""
    unfenced = _CLOSED_FENCE.sub(lambda m: m.group(1), text)
    return _DANGLING_FENCE.sub("", unfenced).strip()


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def decode_json_object(text: str | None) -> dict[str, Any]:
    """Decode a JSON object from model output.

    Args:
        text: Raw generation output.

    Returns:
        The decoded object.

    Raises:
        ParseError: If no tier yields a JSON object.
    """
    if not text or not text.strip():
        raise ParseError("Empty response from generation service")

    parsed = _loads_object(text)
    if parsed is not None:
        return parsed

    cleaned = strip_code_fences(text)
    parsed = _loads_object(cleaned)
    if parsed is not None:
        return parsed

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last > first:
        parsed = _loads_object(cleaned[first : last + 1])
        if parsed is not None:
            return parsed

    raise ParseError(f"Response is not a JSON object: {text[:200]!r}")
