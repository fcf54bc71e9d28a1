"""Catalog and transcript data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Platform(str, Enum):
    """Platform a video was published on."""

    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    UNKNOWN = "unknown"


class VideoDescriptor(BaseModel):
    """One video in a creator's catalog.

    Immutable. The position of a descriptor in the catalog list is the
    canonical index used throughout a pipeline run.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., description="Platform video id")
    platform: Platform = Field(default=Platform.UNKNOWN)
    handle: str | None = Field(default=None, description="Author handle, with or without @")
    shortcode: str | None = Field(default=None, description="Instagram reel shortcode")
    permalink: str | None = None
    share_url: str | None = None
    download_url: str | None = None
    play_url: str | None = None
    audio_url: str | None = None
    caption: str = ""
    duration_sec: float | None = None
    thumbnail_url: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Platforms hand out numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("platform", mode="before")
    @classmethod
    def _coerce_platform(cls, value: object) -> object:
        if value is None:
            return Platform.UNKNOWN
        if isinstance(value, str):
            try:
                return Platform(value.strip().lower())
            except ValueError:
                return Platform.UNKNOWN
        return value

    @property
    def candidate_urls(self) -> list[str]:
        """Known URLs in priority order (permalink first, audio last)."""
        ordered = [
            self.permalink,
            self.share_url,
            self.download_url,
            self.play_url,
            self.audio_url,
        ]
        return [url for url in ordered if url]


class TranscriptResult(BaseModel):
    """Transcript of one successfully transcribed video."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    source_index: int = Field(..., ge=0, description="0-based catalog index")
    text: str = Field(..., description="Transcript text")
    resolved_url: str | None = Field(default=None, description="URL that was transcribed")
    source_url: str | None = Field(default=None, description="Page URL the media was scraped from")
    video_id: str | None = None
    platform: Platform = Platform.UNKNOWN
    title: str | None = None
    thumbnail_url: str | None = None
