"""
Async job models.

Provider-neutral job requests and the snapshot returned while polling.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """Provider job lifecycle, normalised across providers."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobSnapshot(BaseModel):
    """State of a remote job as last observed."""

    job_id: str
    status: JobStatus
    error: Optional[str] = None
    output: Any = None


class VideoRequest(BaseModel):
    """Text (+ optional reference image) to video."""

    prompt: str
    duration: int = Field(gt=0, description="Target duration in seconds")
    reference_image_urls: List[str] = Field(default_factory=list)
    resolution: Optional[str] = None
    speech_text: Optional[str] = Field(default=None, description="Dialog embedded verbatim in the prompt")


class SpeechRequest(BaseModel):
    """Text to speech with a reference voice."""

    text: str = Field(min_length=1)
    reference_voice_url: str
    seed: Optional[int] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ImageRequest(BaseModel):
    """Text (+ optional reference images) to image."""

    prompt: str
    reference_image_urls: List[str] = Field(default_factory=list)
    aspect_ratio: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


class BackgroundRemovalRequest(BaseModel):
    """Image in, same image with transparent background out."""

    image_url: str
