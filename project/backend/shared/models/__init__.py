"""
Data models for the broadcast generation pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .story import Story, Segment, SegmentType, LowerThird
from .video import (
    VideoSegment,
    GeneratedVideo,
    SegmentStatus,
    VideoStatus,
    VideoGenerationProgress
)
from .job import (
    JobStatus,
    JobSnapshot,
    VideoRequest,
    SpeechRequest,
    ImageRequest,
    BackgroundRemovalRequest
)

__all__ = [
    # Story models
    "Story",
    "Segment",
    "SegmentType",
    "LowerThird",
    # Generation state
    "VideoSegment",
    "GeneratedVideo",
    "SegmentStatus",
    "VideoStatus",
    "VideoGenerationProgress",
    # Job models
    "JobStatus",
    "JobSnapshot",
    "VideoRequest",
    "SpeechRequest",
    "ImageRequest",
    "BackgroundRemovalRequest",
]
