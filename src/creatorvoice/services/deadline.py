"""Deadline and cancellation wrapper for external calls."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from creatorvoice.errors import PipelineCancelled

T = TypeVar("T")


async def call_with_deadline(
    awaitable: Awaitable[T],
    timeout: float | None = None,
    cancel_event: asyncio.Event | None = None,
) -> T:
    """Await an external call under an optional deadline and cancel signal.

    Args:
        awaitable: The collaborator call.
        timeout: Seconds before giving up, or None for no deadline.
        cancel_event: When set, the call is abandoned.

    Returns:
        The call's result.

    Raises:
        asyncio.TimeoutError: The deadline passed first.
        PipelineCancelled: ``cancel_event`` was set first.
    """
    if cancel_event is not None and cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise PipelineCancelled("Run cancelled")

    if cancel_event is None:
        return await asyncio.wait_for(awaitable, timeout=timeout)

    call = asyncio.ensure_future(asyncio.wait_for(awaitable, timeout=timeout))
    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait(
            {call, cancelled}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        call.cancel()
        raise
    finally:
        cancelled.cancel()

    if call in done:
        return call.result()

    call.cancel()
    # Drain the abandoned call so its exception is not reported as unretrieved
    try:
        await call
    except (asyncio.CancelledError, Exception):
        pass
    raise PipelineCancelled("Run cancelled")
