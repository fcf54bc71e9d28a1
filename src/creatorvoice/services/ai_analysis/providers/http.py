"""HTTP JSON generation provider for a generic analyze-patterns endpoint."""

import logging
from typing import Any

import httpx

from creatorvoice.errors import GenerationError, TransientNetworkError
from creatorvoice.services.interfaces import GenerationRequest, GenerationResponse

logger = logging.getLogger(__name__)

_TRANSIENT_STATUS = {502, 503, 504}


class HttpJSONGenerator:
    """JSON generation through an HTTP endpoint.

    The endpoint receives ``{prompt, systemPrompt, temperature, maxTokens,
    model, responseType: "json"}`` and answers with the generated text in
    ``content`` (or ``text``).
    """

    def __init__(self, endpoint: str | None, timeout: float = 120.0) -> None:
        """Initialize the provider.

        Args:
            endpoint: Full URL of the generation endpoint.
            timeout: HTTP request timeout in seconds.
        """
        self._endpoint = endpoint
        self._timeout = timeout

    @property
    def name(self) -> str:
        """Provider name identifier."""
        return "http"

    @property
    def is_available(self) -> bool:
        """Whether an endpoint is configured."""
        return bool(self._endpoint)

    async def generate_json(self, request: GenerationRequest) -> GenerationResponse:
        """POST the request and return the generated text.

        Raises:
            TransientNetworkError: Timeouts, network errors, 502/503/504.
            GenerationError: Any other failure.
        """
        if not self._endpoint:
            raise GenerationError("HTTP generation provider has no endpoint configured")

        payload = {
            "prompt": request.prompt,
            "systemPrompt": request.system_prompt,
            "temperature": request.temperature,
            "maxTokens": request.max_tokens,
            "model": request.model,
            "responseType": "json",
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(self._endpoint, json=payload)
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                raise TransientNetworkError(f"Generation service unreachable: {e}") from e
            except httpx.RequestError as e:
                raise GenerationError(f"Generation request failed: {e}") from e

        if response.status_code in _TRANSIENT_STATUS:
            raise TransientNetworkError(
                f"Generation service returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data: Any = response.json()
        except ValueError:
            data = None

        if response.status_code != 200:
            detail = data.get("error") if isinstance(data, dict) else response.text[:500]
            raise GenerationError(
                f"Generation service returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        if not isinstance(data, dict):
            # Some deployments return the generated text as the body
            return GenerationResponse(text=response.text)

        if data.get("success") is False:
            raise GenerationError(f"Generation failed: {data.get('error', 'unknown error')}")

        text = data.get("content")
        if text is None:
            text = data.get("text", "")
        return GenerationResponse(
            text=text if isinstance(text, str) else "",
            metadata={"model": request.model},
        )
