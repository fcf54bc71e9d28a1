"""Job management for the creatorvoice API."""

from creatorvoice.jobs.manager import JobManager
from creatorvoice.jobs.models import Job, JobResult, JobStatus, JobType

__all__ = ["Job", "JobManager", "JobResult", "JobStatus", "JobType"]
