"""Bounded-concurrency transcription over a video catalog."""

import asyncio
import itertools
import logging

from creatorvoice.errors import PipelineCancelled, ResolutionError, TranscriptionError
from creatorvoice.models.catalog import TranscriptResult, VideoDescriptor
from creatorvoice.services.deadline import call_with_deadline
from creatorvoice.services.interfaces import IScraper, ITranscriber
from creatorvoice.services.media_resolver import MediaResolver

logger = logging.getLogger(__name__)


class TranscriptionScheduler:
    """Drive resolve -> scrape -> transcribe over a catalog with W workers.

    Workers share a single claim cursor. Each claimed index owns exactly one
    slot of a preallocated result list, so slots are written without a lock.
    The returned list is the compacted slot list: successful transcripts in
    catalog order, with failed or unresolvable videos dropped.
    """

    def __init__(
        self,
        resolver: MediaResolver,
        transcriber: ITranscriber,
        scraper: IScraper | None = None,
        prefer_audio_only: bool = True,
        call_timeout: float | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            resolver: Media URL resolver.
            transcriber: Speech-to-text collaborator.
            scraper: Optional collaborator that refreshes media URLs.
            prefer_audio_only: Passed through to the scraper.
            call_timeout: Deadline in seconds for each external call.
        """
        self._resolver = resolver
        self._transcriber = transcriber
        self._scraper = scraper
        self._prefer_audio_only = prefer_audio_only
        self._call_timeout = call_timeout

    async def run(
        self,
        descriptors: list[VideoDescriptor],
        concurrency: int,
        cancel_event: asyncio.Event | None = None,
    ) -> list[TranscriptResult]:
        """Transcribe every descriptor, tolerating per-video failures.

        Args:
            descriptors: Ordered catalog.
            concurrency: Worker count W (clamped to 1..len(descriptors)).
            cancel_event: When set, workers stop claiming new videos.

        Returns:
            Transcripts in catalog order (a subsequence of ``descriptors``).

        Raises:
            PipelineCancelled: If ``cancel_event`` was set during the run.
        """
        total = len(descriptors)
        slots: list[TranscriptResult | None] = [None] * total
        if total == 0:
            return []

        cursor = itertools.count()

        async def worker(worker_id: int) -> None:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    return
                index = next(cursor)
                if index >= total:
                    return
                logger.debug("[W%d] claimed video %d/%d", worker_id, index + 1, total)
                try:
                    slots[index] = await self._process(index, descriptors[index], cancel_event)
                except PipelineCancelled:
                    return

        worker_count = min(max(concurrency, 1), total)
        logger.info(
            "Transcribing %d video(s) with %d worker(s)", total, worker_count
        )
        await asyncio.gather(*(worker(w + 1) for w in range(worker_count)))

        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelled("Transcription cancelled")

        results = [slot for slot in slots if slot is not None]
        logger.info(
            "Transcription finished: %d of %d video(s) transcribed", len(results), total
        )
        return results

    async def _process(
        self,
        index: int,
        descriptor: VideoDescriptor,
        cancel_event: asyncio.Event | None,
    ) -> TranscriptResult | None:
        """Transcribe one video; return None when it has to be skipped."""
        try:
            resolved_url = self._resolver.require(descriptor)
            media_url, title, thumbnail_url = await self._refresh_media_url(
                resolved_url, cancel_event
            )

            try:
                text = await call_with_deadline(
                    self._transcriber.transcribe(media_url),
                    timeout=self._call_timeout,
                    cancel_event=cancel_event,
                )
            except asyncio.TimeoutError as e:
                raise TranscriptionError(
                    f"Transcription timed out after {self._call_timeout}s"
                ) from e

            if not isinstance(text, str) or not text.strip():
                raise TranscriptionError("Transcription produced no text")

        except (ResolutionError, TranscriptionError) as e:
            logger.warning("Skipping video %d (%s): %s", index + 1, descriptor.id, e)
            return None
        except PipelineCancelled:
            raise
        except Exception as e:
            logger.warning(
                "Skipping video %d (%s) after unexpected error: %s",
                index + 1,
                descriptor.id,
                e,
            )
            return None

        return TranscriptResult(
            source_index=index,
            text=text.strip(),
            resolved_url=media_url,
            source_url=resolved_url if resolved_url != media_url else None,
            video_id=descriptor.id,
            platform=descriptor.platform,
            title=title or descriptor.caption or None,
            thumbnail_url=thumbnail_url or descriptor.thumbnail_url,
        )

    async def _refresh_media_url(
        self,
        resolved_url: str,
        cancel_event: asyncio.Event | None,
    ) -> tuple[str, str | None, str | None]:
        """Ask the scraper for a fresher media URL, falling back silently.

        Returns:
            Tuple of (media_url, title, thumbnail_url).
        """
        if self._scraper is None:
            return resolved_url, None, None

        try:
            scraped = await call_with_deadline(
                self._scraper.scrape(resolved_url, prefer_audio_only=self._prefer_audio_only),
                timeout=self._call_timeout,
                cancel_event=cancel_event,
            )
        except PipelineCancelled:
            raise
        except Exception as e:
            logger.debug("Scrape failed for %s, using resolved URL: %s", resolved_url, e)
            return resolved_url, None, None

        media_url = scraped.media_url(self._prefer_audio_only) or resolved_url
        return media_url, scraped.title, scraped.thumbnail_url
