"""
Error hierarchy for the broadcast pipeline.

Infrastructure errors (config, validation, retryable transport failures) and the
pipeline's error kinds (job creation/timeout/failure, mux, concat, fatal).
"""

from typing import Any, Optional


class PipelineError(Exception):
    """Base error for everything raised by the pipeline."""

    def __init__(self, message: str, story_id: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.story_id = story_id
        self.code = code or self.__class__.__name__


class ConfigError(PipelineError):
    """Invalid or missing configuration."""


class ValidationError(PipelineError):
    """Invalid input data or illegal state transition."""


class RetryableError(PipelineError):
    """Transient failure that may succeed on retry."""


class RateLimitError(RetryableError):
    """Provider rate limit hit."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class StorageError(PipelineError):
    """Durable storage operation failed."""


class GenerationError(PipelineError):
    """Asset generation failed for a segment."""


class JobCreationFailed(GenerationError):
    """Remote provider rejected the job at creation time."""

    def __init__(self, status_code: int, body: str, provider: str = "provider"):
        super().__init__(f"{provider} job creation failed ({status_code}): {body}")
        self.status_code = status_code
        self.body = body
        self.provider = provider


class JobTimeout(GenerationError):
    """Polling exceeded the configured bound."""

    def __init__(self, job_id: str, elapsed: float):
        super().__init__(f"Job {job_id} did not finish within {elapsed:.1f}s")
        self.job_id = job_id
        self.elapsed = elapsed


class JobFailed(GenerationError):
    """Remote provider reported a terminal failure."""

    def __init__(self, job_id: str, detail: Optional[str] = None):
        super().__init__(f"Job {job_id} failed: {detail or 'no detail reported'}")
        self.job_id = job_id
        self.detail = detail


class JobCancelled(GenerationError):
    """Caller cancelled the run while a job was being polled."""

    def __init__(self, job_id: Optional[str] = None, reason: Optional[str] = None):
        target = f"job {job_id}" if job_id else "generation"
        super().__init__(f"Cancelled {target}: {reason or 'cancelled by caller'}")
        self.job_id = job_id
        self.reason = reason


class PollTimeout(PipelineError):
    """A poll loop ran past its deadline."""

    def __init__(self, elapsed: float):
        super().__init__(f"Polling timed out after {elapsed:.1f}s")
        self.elapsed = elapsed


class CompositionError(PipelineError):
    """Media composition failed."""


class MuxFailed(CompositionError):
    """Combining a segment's video and audio failed."""


class ConcatFailed(CompositionError):
    """Final concatenation failed."""


class PipelineFatal(PipelineError):
    """Unrecoverable error outside per-segment isolation."""
