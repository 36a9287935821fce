"""
Provider contract for asynchronous generation jobs.
"""

from abc import ABC, abstractmethod
from typing import Any

from shared.models.job import JobSnapshot


class JobProvider(ABC):
    """A remote service exposing create / status / fetch for async jobs."""

    name: str = "provider"

    @abstractmethod
    async def create(self, request: Any) -> JobSnapshot:
        """
        Submit a job.

        Raises:
            JobCreationFailed: If the provider rejects the request
        """

    @abstractmethod
    async def status(self, job_id: str) -> JobSnapshot:
        """Return the current state of a job."""

    @abstractmethod
    async def fetch(self, snapshot: JobSnapshot) -> str:
        """Return a URL (or data: URL) for the asset of a completed job."""
