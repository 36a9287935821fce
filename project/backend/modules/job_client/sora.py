"""
OpenAI video provider.

Creates render jobs on the videos endpoint, polls them, and stores the finished
MP4 under the generated media directory.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from shared.config import settings
from shared.errors import ConfigError, GenerationError, JobCreationFailed, RateLimitError, RetryableError
from shared.logging import get_logger
from shared.models.job import JobSnapshot, JobStatus, VideoRequest
from shared.retry import retry_with_backoff
from modules.composer.config import generated_file, generated_url
from modules.composer.downloader import MediaFetcher
from modules.job_client.base import JobProvider
from modules.job_client.config import (
    HTTP_TIMEOUT_SECONDS,
    DOWNLOAD_TIMEOUT_SECONDS,
    SORA_STATUS_MAP,
    STATUS_RETRY_ATTEMPTS,
    STATUS_RETRY_DELAY_SECONDS,
)

logger = get_logger("job_client.sora")


def _error_detail(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message") or error.get("code")
        if error:
            return str(error)
    return None


def _raise_for_poll_status(response: httpx.Response, job_id: str) -> None:
    if response.is_success:
        return
    if response.status_code == 429:
        retry_after = response.headers.get("retry-after")
        raise RateLimitError(
            f"Rate limited polling job {job_id}",
            retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None
        )
    if response.status_code >= 500:
        raise RetryableError(f"Status check for {job_id} failed ({response.status_code}): {response.text}")
    raise GenerationError(f"Status check for {job_id} failed ({response.status_code}): {response.text}")


class SoraProvider(JobProvider):
    """Text / reference-image to video via the OpenAI videos API."""

    name = "sora"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        size: Optional[str] = None,
        generated_dir: Optional[Path] = None,
        fetcher: Optional[MediaFetcher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key or settings.openai_api_key
        if not self.api_key:
            raise ConfigError("OPENAI_API_KEY is required for video generation")
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.sora_model
        self.size = size or settings.sora_size
        self.generated_dir = Path(generated_dir or settings.generated_dir)
        self.fetcher = fetcher or MediaFetcher(generated_dir=self.generated_dir)
        self._transport = transport

    def _client(self, timeout: float = HTTP_TIMEOUT_SECONDS) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=timeout,
            transport=self._transport
        )

    async def _reference_file(self, url: str) -> Optional[tuple]:
        """Load the identity reference; a missing reference never blocks generation."""
        try:
            image_bytes = await self.fetcher.fetch_bytes(url)
        except Exception as e:
            logger.warning(
                f"Could not load reference image, continuing without it: {e}",
                extra={"reference_url": url[:120]}
            )
            return None
        return ("reference.png", image_bytes, "image/png")

    @retry_with_backoff(max_attempts=2, base_delay=2, retryable_exceptions=(RetryableError,))
    async def create(self, request: VideoRequest) -> JobSnapshot:
        payload: Dict[str, Any] = {
            "prompt": request.prompt,
            "model": self.model,
            "seconds": str(request.duration),
            "size": request.resolution or self.size,
        }
        reference = None
        if request.reference_image_urls:
            reference = await self._reference_file(request.reference_image_urls[0])

        try:
            async with self._client() as client:
                if reference:
                    response = await client.post("/videos", data=payload, files={"input_reference": reference})
                else:
                    response = await client.post("/videos", json=payload)
        except httpx.TransportError as e:
            raise RetryableError(f"Video job creation transport error: {e}") from e

        if not response.is_success:
            logger.error(
                f"Video job creation rejected ({response.status_code})",
                extra={"status_code": response.status_code, "body": response.text[:500]}
            )
            raise JobCreationFailed(response.status_code, response.text, provider=self.name)

        body = response.json()
        job_id = body.get("id")
        if not job_id:
            raise JobCreationFailed(response.status_code, f"No job id in response: {response.text}", provider=self.name)

        logger.info(
            "Video job created",
            extra={"job_id": job_id, "seconds": payload["seconds"], "has_reference": reference is not None}
        )
        return self._snapshot(job_id, body)

    def _snapshot(self, job_id: str, body: Dict[str, Any]) -> JobSnapshot:
        raw_status = body.get("status", "queued")
        status = SORA_STATUS_MAP.get(raw_status, JobStatus.FAILED)
        error = _error_detail(body)
        if status == JobStatus.FAILED and not error:
            error = f"status={raw_status}"
        return JobSnapshot(job_id=job_id, status=status, error=error, output=body)

    @retry_with_backoff(
        max_attempts=STATUS_RETRY_ATTEMPTS,
        base_delay=STATUS_RETRY_DELAY_SECONDS,
        retryable_exceptions=(RetryableError,)
    )
    async def status(self, job_id: str) -> JobSnapshot:
        try:
            async with self._client() as client:
                response = await client.get(f"/videos/{job_id}")
        except httpx.TransportError as e:
            raise RetryableError(f"Status check transport error for {job_id}: {e}") from e
        _raise_for_poll_status(response, job_id)
        return self._snapshot(job_id, response.json())

    async def fetch(self, snapshot: JobSnapshot) -> str:
        out_path = generated_file("videos", f"{snapshot.job_id}.mp4", self.generated_dir)
        url = generated_url("videos", out_path.name)
        if out_path.exists() and out_path.stat().st_size > 0:
            return url

        try:
            async with self._client(timeout=DOWNLOAD_TIMEOUT_SECONDS) as client:
                response = await client.get(f"/videos/{snapshot.job_id}/content")
        except httpx.TransportError as e:
            raise RetryableError(f"Video download transport error for {snapshot.job_id}: {e}") from e
        if not response.is_success:
            raise GenerationError(
                f"Video download failed for {snapshot.job_id} ({response.status_code}): {response.text}"
            )

        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(response.content)
        logger.info(
            "Video downloaded",
            extra={"job_id": snapshot.job_id, "path": str(out_path), "size": len(response.content)}
        )
        return url
