"""
Generation state models.

VideoSegment and GeneratedVideo carry an explicit status enum; lifecycle state
is never inferred from which URLs happen to be set.
"""

from enum import Enum
from typing import Dict, List, Optional, Set
from pydantic import BaseModel, Field

from shared.errors import ValidationError
from shared.models.story import SegmentFields, Story


class SegmentStatus(str, Enum):
    """Lifecycle of one segment within a run."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class VideoStatus(str, Enum):
    """Lifecycle of a whole run."""

    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


SEGMENT_TRANSITIONS: Dict[SegmentStatus, Set[SegmentStatus]] = {
    SegmentStatus.PENDING: {SegmentStatus.GENERATING},
    SegmentStatus.GENERATING: {SegmentStatus.COMPLETED, SegmentStatus.ERROR},
    SegmentStatus.COMPLETED: set(),
    SegmentStatus.ERROR: set(),
}

VIDEO_TRANSITIONS: Dict[VideoStatus, Set[VideoStatus]] = {
    VideoStatus.GENERATING: {VideoStatus.COMPLETED, VideoStatus.ERROR},
    VideoStatus.COMPLETED: set(),
    VideoStatus.ERROR: set(),
}


class VideoSegment(SegmentFields):
    """Mutable generation state for one story segment."""

    index: int = Field(ge=0, description="Position of the segment in the story")
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    first_frame_image_url: Optional[str] = None
    preview_image_url: Optional[str] = None
    lower_third_url: Optional[str] = None
    status: SegmentStatus = SegmentStatus.PENDING
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (SegmentStatus.COMPLETED, SegmentStatus.ERROR)

    def transition(self, new_status: SegmentStatus, error: Optional[str] = None) -> None:
        """
        Advance the segment status.

        Raises:
            ValidationError: If the move is not pending->generating->{completed|error}
        """
        if new_status not in SEGMENT_TRANSITIONS[self.status]:
            raise ValidationError(
                f"Segment {self.id} cannot move from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        if new_status == SegmentStatus.ERROR:
            self.error = error or "Unknown error"

    def fail(self, error: str) -> None:
        """Record a failure, entering generating first if the segment never started."""
        if self.status == SegmentStatus.PENDING:
            self.transition(SegmentStatus.GENERATING)
        self.transition(SegmentStatus.ERROR, error=error)

    def snapshot(self) -> "VideoSegment":
        """Detached copy handed to persistence."""
        return self.model_copy(deep=True)


class GeneratedVideo(BaseModel):
    """Mutable state of one run; segments stay in story order."""

    story_id: str
    title: str
    segments: List[VideoSegment] = Field(default_factory=list)
    status: VideoStatus = VideoStatus.GENERATING
    progress: int = Field(default=0, ge=0, le=100)
    final_video_url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_story(cls, story: Story) -> "GeneratedVideo":
        """Build initial state: one pending VideoSegment per story segment."""
        segments = [
            VideoSegment(index=i, **segment.model_dump())
            for i, segment in enumerate(story.segments)
        ]
        return cls(story_id=story.story_id, title=story.title, segments=segments)

    @property
    def is_terminal(self) -> bool:
        return self.status != VideoStatus.GENERATING

    def transition(self, new_status: VideoStatus, error: Optional[str] = None) -> None:
        if new_status not in VIDEO_TRANSITIONS[self.status]:
            raise ValidationError(
                f"Video {self.story_id} cannot move from {self.status.value} to {new_status.value}",
                story_id=self.story_id
            )
        self.status = new_status
        if new_status == VideoStatus.ERROR:
            self.error = error or "Unknown error"

    def set_progress(self, progress: int) -> None:
        # Progress is coarse and only moves forward
        self.progress = max(self.progress, min(100, max(0, progress)))

    def segment(self, segment_id: str) -> VideoSegment:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        raise KeyError(segment_id)

    def snapshot(self) -> "GeneratedVideo":
        return self.model_copy(deep=True)


class VideoGenerationProgress(BaseModel):
    """Payload pushed to progress observers at each stage boundary."""

    current_step: str
    progress: int = Field(ge=0, le=100)
    total_steps: int = 4
    current_segment: Optional[str] = None
