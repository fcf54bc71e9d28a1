"""Catalog transcription: worker pool and HTTP collaborators."""

from creatorvoice.services.transcription.clients import HttpScraper, HttpTranscriber
from creatorvoice.services.transcription.scheduler import TranscriptionScheduler

__all__ = ["HttpScraper", "HttpTranscriber", "TranscriptionScheduler"]
