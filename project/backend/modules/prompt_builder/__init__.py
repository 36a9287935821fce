"""
Prompt Builder module public API.

Turns segment metadata into provider-neutral generation requests.
"""

from .builder import (
    DurationWindow,
    DurationWindows,
    build_lower_third_request,
    build_preview_request,
    build_speech_request,
    build_video_request,
    categorize,
    produces_video,
)
from .characters import Character, CharacterDirectory
from .templates import SegmentCategory

__all__ = [
    "Character",
    "CharacterDirectory",
    "DurationWindow",
    "DurationWindows",
    "SegmentCategory",
    "build_lower_third_request",
    "build_preview_request",
    "build_speech_request",
    "build_video_request",
    "categorize",
    "produces_video",
]
