"""
Prompt templates for broadcast segments.
"""

from __future__ import annotations

from enum import Enum


class SegmentCategory(str, Enum):
    STUDIO = "studio"
    FIELD_REPORTER = "field_reporter"
    WITNESS = "witness"
    GENERIC = "generic"


# Checked in order; first substring found in the segment id wins
CATEGORY_MARKERS = (
    (SegmentCategory.STUDIO, "studio"),
    (SegmentCategory.FIELD_REPORTER, "field_reporter"),
    (SegmentCategory.WITNESS, "witness"),
)

VIDEO_TEMPLATES = {
    SegmentCategory.STUDIO: (
        "The news anchor speaks to camera, making subtle hand gestures, slight head movements, "
        "professional broadcast delivery, static camera with slight zoom in"
    ),
    SegmentCategory.FIELD_REPORTER: (
        "Field reporter speaks confidently to camera, slight body movement, professional reporting "
        "stance, outdoor lighting"
    ),
    SegmentCategory.WITNESS: (
        "Person speaks earnestly during interview, natural conversational movements, soft indoor lighting"
    ),
    SegmentCategory.GENERIC: "Person speaks to camera, natural movements, professional video quality",
}

SPOKEN_DIALOG_TEMPLATE = (
    ". Include clearly spoken anchor audio reading this script verbatim with natural pacing "
    'and broadcast delivery: "{dialog}"'
)

LOWER_THIRD_TEMPLATE = "News lower third graphic: {header} - {subheader}"

PREVIEW_ON_CAMERA_TEMPLATE = (
    "{subject} on camera, professional TV news studio, {camera}, well-lit, neutral white balance, "
    "16:9 composition"
)
DEFAULT_PREVIEW_CAMERA = "medium shot, straight-on camera"
PREVIEW_ASPECT_RATIO = "16:9"
