"""Best-available media URL resolution for catalog videos."""

import logging
import re

from creatorvoice.errors import ResolutionError
from creatorvoice.models.catalog import Platform, VideoDescriptor

logger = logging.getLogger(__name__)

_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)

# Instagram ids longer than this are numeric media ids, not shortcodes
_MAX_SHORTCODE_LENGTH = 15


def _usable(url: str | None) -> str | None:
    if not isinstance(url, str):
        return None
    trimmed = url.strip()
    if trimmed and _HTTP_URL.match(trimmed):
        return trimmed
    return None


class MediaResolver:
    """Resolve one video descriptor to a downloadable URL.

    Preference order:
    1. An explicit permalink or share URL on the descriptor.
    2. A platform URL synthesized from handle + id (TikTok) or
       shortcode (Instagram).
    3. A raw download, play or audio URL on the descriptor.

    Having no candidate is a legitimate outcome, not an error.
    """

    def __init__(
        self,
        default_handle: str | None = None,
        default_platform: Platform = Platform.UNKNOWN,
    ) -> None:
        """Initialize the resolver.

        Args:
            default_handle: Creator handle used when a descriptor has none.
            default_platform: Platform assumed when a descriptor says unknown.
        """
        self._default_handle = default_handle
        self._default_platform = default_platform

    def resolve(self, descriptor: VideoDescriptor) -> str | None:
        """Return the best URL for ``descriptor``, or None."""
        for candidate in (descriptor.permalink, descriptor.share_url):
            url = _usable(candidate)
            if url:
                return url

        synthesized = self.platform_url(descriptor)
        if synthesized:
            return synthesized

        for candidate in (descriptor.download_url, descriptor.play_url, descriptor.audio_url):
            url = _usable(candidate)
            if url:
                return url

        logger.debug("No media URL candidates for video %s", descriptor.id)
        return None

    def require(self, descriptor: VideoDescriptor) -> str:
        """Like :meth:`resolve`, but raise when nothing is usable.

        Raises:
            ResolutionError: If the descriptor has no usable URL.
        """
        url = self.resolve(descriptor)
        if url is None:
            raise ResolutionError(
                f"No usable media URL for video {descriptor.id}",
                video_id=descriptor.id,
            )
        return url

    def platform_url(self, descriptor: VideoDescriptor) -> str | None:
        """Synthesize a canonical platform URL, if the platform allows it."""
        platform = descriptor.platform
        if platform == Platform.UNKNOWN:
            platform = self._default_platform

        if platform == Platform.TIKTOK:
            handle = (descriptor.handle or self._default_handle or "").strip().lstrip("@")
            if handle and descriptor.id:
                return f"https://www.tiktok.com/@{handle}/video/{descriptor.id}"

        elif platform == Platform.INSTAGRAM:
            shortcode = (descriptor.shortcode or "").strip()
            if not shortcode and len(descriptor.id) <= _MAX_SHORTCODE_LENGTH:
                shortcode = descriptor.id.strip()
            if shortcode:
                return f"https://www.instagram.com/reel/{shortcode.replace('/', '')}/"

        return None
