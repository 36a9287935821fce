"""
Job client.

Create an async job, poll it at a fixed interval until it reaches a terminal
state, then fetch the asset reference. Holds no state between calls.
"""
from typing import Any, Optional

from shared.cancellation import CancellationToken
from shared.config import settings
from shared.errors import JobFailed, JobTimeout, PollTimeout
from shared.logging import get_logger
from shared.models.job import JobSnapshot, JobStatus
from shared.retry import poll_until
from modules.job_client.base import JobProvider

logger = get_logger("job_client.client")


class JobClient:
    """Uniform create / poll / fetch wrapper around a JobProvider."""

    def __init__(
        self,
        provider: JobProvider,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None
    ):
        self.provider = provider
        self.poll_interval = poll_interval if poll_interval is not None else settings.job_poll_interval_seconds
        self.timeout = timeout if timeout is not None else settings.job_timeout_seconds
        self.cancel_token = cancel_token

    async def create_job(self, request: Any) -> str:
        """
        Submit a job and return its id.

        Raises:
            JobCreationFailed: If the provider rejects the request
        """
        snapshot = await self.provider.create(request)
        return snapshot.job_id

    async def poll_until_terminal(self, job_id: str) -> JobSnapshot:
        """
        Poll until the job completes.

        Raises:
            JobFailed: If the provider reports failure
            JobTimeout: If the job is still running after `timeout` seconds
            JobCancelled: If the cancel token fires between polls
        """
        async def check() -> Optional[JobSnapshot]:
            snapshot = await self.provider.status(job_id)
            logger.debug(
                f"Job {job_id} status {snapshot.status.value}",
                extra={"job_id": job_id, "provider": self.provider.name, "status": snapshot.status.value}
            )
            return snapshot if snapshot.status.is_terminal else None

        try:
            snapshot = await poll_until(
                check,
                interval=self.poll_interval,
                timeout=self.timeout,
                cancel_token=self.cancel_token
            )
        except PollTimeout as e:
            logger.error(
                f"Job {job_id} timed out after {e.elapsed:.1f}s",
                extra={"job_id": job_id, "provider": self.provider.name, "timeout": self.timeout}
            )
            raise JobTimeout(job_id, e.elapsed) from e

        if snapshot.status == JobStatus.FAILED:
            logger.error(
                f"Job {job_id} failed: {snapshot.error}",
                extra={"job_id": job_id, "provider": self.provider.name, "error": snapshot.error}
            )
            raise JobFailed(job_id, snapshot.error)
        return snapshot

    async def fetch_result(self, job_id: str, snapshot: Optional[JobSnapshot] = None) -> str:
        """Return the asset URL of a completed job."""
        if snapshot is None:
            snapshot = await self.provider.status(job_id)
            if snapshot.status != JobStatus.COMPLETED:
                raise JobFailed(job_id, f"result requested while job is {snapshot.status.value}")
        return await self.provider.fetch(snapshot)

    async def run(self, request: Any) -> str:
        """create_job, poll_until_terminal and fetch_result in one call."""
        job_id = await self.create_job(request)
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled(job_id)
        snapshot = await self.poll_until_terminal(job_id)
        url = await self.fetch_result(job_id, snapshot)
        logger.info(
            f"Job {job_id} completed",
            extra={"job_id": job_id, "provider": self.provider.name}
        )
        return url
