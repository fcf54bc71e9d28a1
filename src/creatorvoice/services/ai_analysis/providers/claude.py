"""Claude JSON generation provider."""

import logging

import anthropic

from creatorvoice.errors import GenerationError, TransientNetworkError
from creatorvoice.services.interfaces import GenerationRequest, GenerationResponse

logger = logging.getLogger(__name__)

# 529 is Anthropic's "overloaded", equivalent to a 503
_TRANSIENT_STATUS = {502, 503, 504, 529}


class ClaudeJSONGenerator:
    """JSON generation provider using the Anthropic Claude API.

    Uses the anthropic Python SDK. Gracefully handles missing API keys by
    marking itself as unavailable rather than crashing.
    """

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize the Claude provider.

        Args:
            api_key: Anthropic API key.
        """
        self._api_key = api_key
        self._available = bool(self._api_key)

        if self._available:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key, max_retries=0)
        else:
            self._client = None
            logger.warning("ClaudeJSONGenerator: No API key found, provider unavailable")

    @property
    def name(self) -> str:
        """Provider name identifier."""
        return "claude"

    @property
    def is_available(self) -> bool:
        """Whether the Claude API key is configured."""
        return self._available

    async def generate_json(self, request: GenerationRequest) -> GenerationResponse:
        """Send one prompt to Claude and return the raw text.

        Args:
            request: Prompt, system prompt and sampling parameters.

        Returns:
            GenerationResponse with the concatenated text blocks.

        Raises:
            TransientNetworkError: Timeouts, connection errors and
                gateway/overload statuses.
            GenerationError: Any other API failure.
        """
        if not self._available or self._client is None:
            raise GenerationError("Claude provider is not available (no API key)")

        try:
            response = await self._client.messages.create(
                model=request.model,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                system=request.system_prompt,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except anthropic.APIConnectionError as exc:
            # APITimeoutError is a subclass
            raise TransientNetworkError(f"Claude API unreachable: {exc}") from exc
        except anthropic.APIStatusError as exc:
            if exc.status_code in _TRANSIENT_STATUS:
                raise TransientNetworkError(
                    f"Claude API returned {exc.status_code}", status_code=exc.status_code
                ) from exc
            raise GenerationError(
                f"Claude API error: {exc}", status_code=exc.status_code
            ) from exc
        except anthropic.APIError as exc:
            raise GenerationError(f"Claude API error: {exc}") from exc

        raw_text = ""
        for block in response.content:
            if block.type == "text":
                raw_text += block.text

        return GenerationResponse(
            text=raw_text,
            metadata={
                "model": request.model,
                "stop_reason": response.stop_reason,
                "raw_response_length": len(raw_text),
            },
        )
