"""Sequential batched analysis with a bounded retry budget per batch."""

import asyncio
import logging
import random
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from creatorvoice.errors import (
    BatchAnalysisFailure,
    GenerationError,
    ParseError,
    PipelineCancelled,
    TransientNetworkError,
)
from creatorvoice.models.analysis import TEMPLATE_CATEGORIES, AnalysisFragment
from creatorvoice.models.pipeline import PipelineOptions
from creatorvoice.services.ai_analysis.json_decoder import decode_json_object
from creatorvoice.services.ai_analysis.prompts import SYSTEM_PROMPT, build_batch_prompt
from creatorvoice.services.deadline import call_with_deadline
from creatorvoice.services.interfaces import GenerationRequest, IJSONGenerator

logger = logging.getLogger(__name__)

T = TypeVar("T")

BatchCallback = Callable[[int, int], None]

_SECTION_KEYS = ("templates", "styleSignature", "style_signature", "transcripts")


def chunk_transcripts(items: list[T], size: int) -> list[list[T]]:
    """Split items into consecutive chunks of ``size`` (the last may be shorter)."""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    return [items[start : start + size] for start in range(0, len(items), size)]


def _failure_reason(exc: BaseException) -> str:
    if isinstance(exc, ParseError):
        return "parse"
    if isinstance(exc, TransientNetworkError):
        return "network"
    return "generation"


class BatchAnalysisCoordinator:
    """Analyze transcripts in fixed-size batches, one batch at a time.

    Each batch gets up to ``retry_budget + 1`` generation calls. Parse
    failures and transient network failures are retried; any other
    generation failure fails the batch at once. A batch that runs out of
    attempts aborts the run with :class:`BatchAnalysisFailure`, so callers
    never see a partial list of fragments.
    """

    def __init__(self, generator: IJSONGenerator, options: PipelineOptions) -> None:
        """Initialize the coordinator.

        Args:
            generator: Structured-JSON generation collaborator.
            options: Model, sampling, deadline and retry-delay settings.
        """
        self._generator = generator
        self._options = options

    async def run(
        self,
        transcripts: list[str],
        batch_size: int,
        retry_budget: int,
        cancel_event: asyncio.Event | None = None,
        on_batch_done: BatchCallback | None = None,
    ) -> list[AnalysisFragment]:
        """Analyze every batch in order.

        Args:
            transcripts: Transcript texts in catalog order.
            batch_size: Transcripts per batch (B).
            retry_budget: Extra attempts per batch (R).
            cancel_event: When set, the run stops before the next call.
            on_batch_done: Called with (batch number, total) after each batch.

        Returns:
            One fragment per batch, in batch order.

        Raises:
            BatchAnalysisFailure: A batch exhausted its attempts.
            PipelineCancelled: ``cancel_event`` was set.
        """
        batches = chunk_transcripts(transcripts, batch_size)
        total = len(batches)
        logger.info(
            "Analyzing %d transcript(s) in %d batch(es) of up to %d",
            len(transcripts),
            total,
            batch_size,
        )

        fragments: list[AnalysisFragment] = []
        for number, batch in enumerate(batches, start=1):
            fragment = await self._analyze_batch(
                batch, number, total, retry_budget, cancel_event
            )
            fragments.append(fragment)
            logger.info(
                "Batch %d/%d analyzed: %d hook(s), %d breakdown(s)",
                number,
                total,
                len(fragment.templates.hooks),
                len(fragment.transcripts),
            )
            if on_batch_done:
                on_batch_done(number, total)
        return fragments

    async def _analyze_batch(
        self,
        batch: list[str],
        number: int,
        total: int,
        retry_budget: int,
        cancel_event: asyncio.Event | None,
    ) -> AnalysisFragment:
        request = GenerationRequest(
            prompt=build_batch_prompt(batch),
            system_prompt=SYSTEM_PROMPT,
            temperature=self._options.temperature,
            max_tokens=self._options.max_tokens,
            model=self._options.model,
        )

        def log_retry(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "Batch %d/%d attempt %d failed (%s), retrying: %s",
                number,
                total,
                retry_state.attempt_number,
                _failure_reason(exc) if exc else "unknown",
                exc,
            )

        async def sleep(seconds: float) -> None:
            if cancel_event is None:
                await asyncio.sleep(seconds)
                return
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
            except asyncio.TimeoutError:
                return
            raise PipelineCancelled("Run cancelled")

        retrying = AsyncRetrying(
            retry=retry_if_exception_type((ParseError, TransientNetworkError)),
            stop=stop_after_attempt(retry_budget + 1),
            wait=self._retry_delay,
            before_sleep=log_retry,
            sleep=sleep,
            reraise=True,
        )

        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if cancel_event is not None and cancel_event.is_set():
                        raise PipelineCancelled("Run cancelled")
                    return await self._attempt(request, len(batch), cancel_event)
        except (ParseError, TransientNetworkError, GenerationError) as exc:
            logger.error(
                "Batch %d/%d failed after %d attempt(s): %s", number, total, attempts, exc
            )
            raise BatchAnalysisFailure(
                batch_index=number,
                total_batches=total,
                reason=_failure_reason(exc),
                attempts=attempts,
                detail=str(exc),
            ) from exc
        except PipelineCancelled:
            raise
        except Exception as exc:
            logger.error(
                "Batch %d/%d raised an unexpected error after %d attempt(s): %r",
                number,
                total,
                attempts,
                exc,
            )
            raise BatchAnalysisFailure(
                number, total, "generation", attempts, detail=str(exc)
            ) from exc

        # AsyncRetrying with reraise=True either returns or raises above
        raise BatchAnalysisFailure(number, total, "generation", attempts)

    def _retry_delay(self, retry_state: RetryCallState) -> float:
        """Delay before the next attempt, chosen by the last failure's kind."""
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, TransientNetworkError):
            base = self._options.network_retry_delay
        else:
            base = self._options.parse_retry_delay
        delay = base * self._options.retry_backoff ** (retry_state.attempt_number - 1)
        if self._options.retry_jitter > 0:
            delay += random.uniform(0, self._options.retry_jitter)
        return delay

    async def _attempt(
        self,
        request: GenerationRequest,
        batch_len: int,
        cancel_event: asyncio.Event | None,
    ) -> AnalysisFragment:
        """Make one generation call and validate its output."""
        try:
            response = await call_with_deadline(
                self._generator.generate_json(request),
                timeout=self._options.call_timeout,
                cancel_event=cancel_event,
            )
        except asyncio.TimeoutError as e:
            raise TransientNetworkError(
                f"Generation timed out after {self._options.call_timeout}s"
            ) from e

        payload = decode_json_object(response.text)
        return self._validate_fragment(payload, batch_len)

    @staticmethod
    def _validate_fragment(payload: dict[str, Any], batch_len: int) -> AnalysisFragment:
        if not any(key in payload for key in _SECTION_KEYS):
            raise ParseError(
                "Response has none of templates, styleSignature or transcripts"
            )

        try:
            fragment = AnalysisFragment.model_validate(payload)
        except ValidationError as e:
            raise ParseError(f"Response does not match the analysis schema: {e}") from e

        for name in TEMPLATE_CATEGORIES:
            for position, item in enumerate(fragment.templates.category(name), start=1):
                local = item.source_index if item.source_index is not None else position
                if not 1 <= local <= batch_len:
                    raise ParseError(
                        f"templates.{name} item {position} references transcript "
                        f"{local} outside 1..{batch_len}"
                    )

        for position, entry in enumerate(fragment.transcripts, start=1):
            local = entry.index if entry.index is not None else position
            if not 1 <= local <= batch_len:
                raise ParseError(
                    f"transcripts item {position} has index {local} outside 1..{batch_len}"
                )

        return fragment
