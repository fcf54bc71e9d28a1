"""Configuration management for creatorvoice."""

from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from creatorvoice.models.pipeline import PipelineOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Only the CLI and the HTTP app read these. The pipeline itself receives an
    explicit ``PipelineOptions`` built by :meth:`pipeline_options`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    max_concurrent_jobs: int = 2

    # Collaborators
    transcribe_url: str = "http://localhost:3000/api/video/transcribe-from-url"
    scrape_url: str | None = None
    generation_url: str | None = None
    handoff_url: str | None = None
    collaborator_timeout: float = 60.0

    # Generation provider ("claude" or "http")
    generator_provider: str = "claude"
    anthropic_api_key: str | None = None

    # Pipeline defaults
    max_videos: int = 20
    worker_concurrency: int = 2
    batch_size: int = 5
    retry_budget: int = 2
    model: str = "claude-sonnet-4-20250514"
    temperature: float = 0.2
    max_tokens: int = 6000
    prefer_audio_only: bool = True
    use_scrape: bool = True
    call_timeout: float | None = 120.0
    parse_retry_delay: float = 1.0
    network_retry_delay: float = 2.0
    retry_backoff: float = 1.0
    retry_jitter: float = 0.0

    def pipeline_options(self, **overrides: Any) -> PipelineOptions:
        """Build pipeline options from settings plus per-run overrides.

        Overrides whose value is ``None`` are ignored so optional CLI flags
        and request fields can be passed straight through.
        """
        values: dict[str, Any] = {
            "max_videos": self.max_videos,
            "worker_concurrency": self.worker_concurrency,
            "batch_size": self.batch_size,
            "retry_budget": self.retry_budget,
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "prefer_audio_only": self.prefer_audio_only,
            "use_scrape": self.use_scrape,
            "call_timeout": self.call_timeout,
            "parse_retry_delay": self.parse_retry_delay,
            "network_retry_delay": self.network_retry_delay,
            "retry_backoff": self.retry_backoff,
            "retry_jitter": self.retry_jitter,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return PipelineOptions(**values)


# Global settings instance
settings = Settings()
