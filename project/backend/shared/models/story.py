"""
Story input models.

A Story is authored upstream and never mutated by the pipeline.
"""

from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SegmentType(str, Enum):
    """Kind of narrative beat a segment represents."""

    ON_CAMERA = "on_camera"
    B_ROLL = "b_roll"
    VOICEOVER = "voiceover"


# Wire names emitted by the story generator
SEGMENT_TYPE_ALIASES = {
    "veo3": SegmentType.ON_CAMERA,
    "on-camera": SegmentType.ON_CAMERA,
    "runway": SegmentType.B_ROLL,
    "b-roll": SegmentType.B_ROLL,
    "broll": SegmentType.B_ROLL,
    "tts_voiceover": SegmentType.VOICEOVER,
}


def coerce_segment_type(value: Any) -> Any:
    """Map story-generator wire names onto SegmentType values."""
    if isinstance(value, str):
        return SEGMENT_TYPE_ALIASES.get(value.lower(), value)
    return value


class LowerThird(BaseModel):
    """Broadcast text overlay requested for a segment."""

    model_config = ConfigDict(frozen=True)

    header: str
    subheader: str = ""


class SegmentFields(BaseModel):
    """Fields shared by authored segments and their generation state."""

    id: str = Field(min_length=1)
    type: SegmentType
    duration: Optional[float] = Field(default=None, description="Advisory duration in seconds")
    character: Optional[str] = None
    role: Optional[str] = None
    camera_description: Optional[str] = None
    dialog: Optional[str] = None
    visual_description: Optional[str] = None
    voiceover_script: Optional[str] = None
    lower_third: Optional[LowerThird] = None

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        return coerce_segment_type(v)


class Segment(SegmentFields):
    """One authored beat of a story."""

    model_config = ConfigDict(frozen=True)


class Story(BaseModel):
    """Pipeline input: ordered segments of one satirical news story."""

    model_config = ConfigDict(frozen=True)

    story_id: str = Field(min_length=1)
    title: str
    duration_seconds: float = Field(default=0, ge=0)
    segments: List[Segment] = Field(default_factory=list)

    @field_validator("segments")
    @classmethod
    def validate_unique_segment_ids(cls, v: List[Segment]) -> List[Segment]:
        """Segment ids key persistence and must be unique within a story."""
        seen = set()
        for segment in v:
            if segment.id in seen:
                raise ValueError(f"Duplicate segment id: {segment.id}")
            seen.add(segment.id)
        return v
