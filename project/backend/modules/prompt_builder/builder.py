"""
Segment prompt builders.

Pure functions from segment metadata to provider-neutral job requests. The
only inputs are the segment, a character directory and configuration; seeds
are supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.config import Settings, settings
from shared.errors import ValidationError
from shared.models.job import ImageRequest, SpeechRequest, VideoRequest
from shared.models.story import LowerThird, SegmentFields, SegmentType

from .characters import CharacterDirectory
from .templates import (
    CATEGORY_MARKERS,
    DEFAULT_PREVIEW_CAMERA,
    LOWER_THIRD_TEMPLATE,
    PREVIEW_ASPECT_RATIO,
    PREVIEW_ON_CAMERA_TEMPLATE,
    SPOKEN_DIALOG_TEMPLATE,
    VIDEO_TEMPLATES,
    SegmentCategory,
)


@dataclass(frozen=True)
class DurationWindow:
    minimum: int
    default: int
    maximum: int

    def clamp(self, duration: Optional[float]) -> int:
        value = duration if duration else self.default
        return int(max(self.minimum, min(self.maximum, round(value))))


@dataclass(frozen=True)
class DurationWindows:
    on_camera: DurationWindow
    b_roll: DurationWindow

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "DurationWindows":
        config = config or settings
        return cls(
            on_camera=DurationWindow(
                config.studio_min_duration, config.studio_default_duration, config.studio_max_duration
            ),
            b_roll=DurationWindow(
                config.broll_min_duration, config.broll_default_duration, config.broll_max_duration
            ),
        )


def categorize(segment_id: str) -> SegmentCategory:
    """Template category from segment id substrings; generic when none match."""
    lowered = segment_id.lower()
    for category, marker in CATEGORY_MARKERS:
        if marker in lowered:
            return category
    return SegmentCategory.GENERIC


def produces_video(segment: SegmentFields) -> bool:
    """Voiceovers only get pictures when they describe some."""
    if segment.type == SegmentType.VOICEOVER:
        return bool(segment.visual_description)
    return True


def build_video_request(
    segment: SegmentFields,
    directory: CharacterDirectory,
    windows: Optional[DurationWindows] = None,
) -> VideoRequest:
    """
    Video generation request for an on-camera or b-roll segment.

    On-camera prompts embed the dialog verbatim so that speech is rendered in
    the video itself. A missing character image never blocks the request.

    Raises:
        ValidationError: If a b-roll or voiceover segment has no visual description
    """
    windows = windows or DurationWindows.from_settings()

    if segment.type == SegmentType.ON_CAMERA:
        duration = windows.on_camera.clamp(segment.duration)
        prompt = f"{VIDEO_TEMPLATES[categorize(segment.id)]}, {duration} seconds"
        dialog = (segment.dialog or "").strip()
        if dialog:
            prompt += SPOKEN_DIALOG_TEMPLATE.format(dialog=dialog)
        reference = directory.resolve_image(segment.character)
        return VideoRequest(
            prompt=prompt,
            duration=duration,
            reference_image_urls=[reference] if reference else [],
            speech_text=dialog or None,
        )

    description = (segment.visual_description or "").strip()
    if not description:
        raise ValidationError(f"Segment {segment.id} has no visual description")
    tagged = directory.expand_tags(description)
    return VideoRequest(
        prompt=tagged.prompt,
        duration=windows.b_roll.clamp(segment.duration),
        reference_image_urls=tagged.reference_image_urls,
    )


def build_speech_request(
    segment: SegmentFields,
    directory: CharacterDirectory,
    seed: Optional[int] = None,
    voice_base_url: Optional[str] = None,
) -> SpeechRequest:
    """
    Text-to-speech request in the segment character's reference voice.

    Raises:
        ValidationError: If the segment has nothing to say
    """
    text = (segment.voiceover_script or segment.dialog or "").strip()
    if not text:
        raise ValidationError(f"Segment {segment.id} has no script to speak")
    base_url = (voice_base_url or settings.voice_base_url).rstrip("/")
    return SpeechRequest(
        text=text,
        reference_voice_url=f"{base_url}/{directory.voice_file(segment.character)}",
        seed=seed,
    )


def build_lower_third_request(lower_third: LowerThird) -> ImageRequest:
    return ImageRequest(
        prompt=LOWER_THIRD_TEMPLATE.format(header=lower_third.header, subheader=lower_third.subheader)
    )


def build_preview_request(segment: SegmentFields, directory: CharacterDirectory) -> Optional[ImageRequest]:
    """Still preview for a segment; None for segments with nothing to show."""
    if segment.type == SegmentType.ON_CAMERA:
        tagged = directory.expand_tags(
            PREVIEW_ON_CAMERA_TEMPLATE.format(
                subject=segment.character or "Person",
                camera=segment.camera_description or DEFAULT_PREVIEW_CAMERA,
            )
        )
        references = list(tagged.reference_image_urls)
        image = directory.resolve_image(segment.character)
        if image and image not in references:
            references.append(image)
        return ImageRequest(
            prompt=tagged.prompt,
            reference_image_urls=references,
            aspect_ratio=PREVIEW_ASPECT_RATIO,
        )

    if segment.type == SegmentType.B_ROLL and segment.visual_description:
        return ImageRequest(prompt=segment.visual_description, aspect_ratio=PREVIEW_ASPECT_RATIO)
    return None
