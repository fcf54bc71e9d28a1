"""Delivery of combined analyses to the persistence/persona service."""

import logging
from typing import Any

import httpx

from creatorvoice.errors import HandoffError
from creatorvoice.services.interfaces import AnalysisHandoff

logger = logging.getLogger(__name__)


class HttpAnalysisSink:
    """POSTs a finished analysis to a downstream HTTP endpoint."""

    def __init__(self, endpoint: str, timeout: float = 30.0) -> None:
        self.endpoint = endpoint
        self.timeout = timeout

    async def deliver(self, handoff: AnalysisHandoff) -> dict[str, Any]:
        """Send the handoff document.

        Returns:
            The service's JSON response (empty dict when it has no body).

        Raises:
            HandoffError: On transport errors or a non-2xx response.
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.endpoint, json=handoff.to_payload())
            except httpx.RequestError as e:
                raise HandoffError(f"Failed to reach analysis service: {e}") from e

        if not response.is_success:
            raise HandoffError(
                f"Analysis service returned {response.status_code}: {response.text[:500]}"
            )

        logger.info(
            "Delivered analysis of %d transcript(s) to %s",
            handoff.transcripts_count,
            self.endpoint,
        )
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"response": body}
