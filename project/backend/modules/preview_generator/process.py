"""
Segment preview stills.

Previews are a cosmetic extra: they run as a detached task beside the main
pipeline, and nothing that happens in here can fail a run.
"""
import asyncio
from typing import Optional

from shared.logging import get_logger
from shared.models.story import SegmentType
from shared.models.video import GeneratedVideo, VideoSegment
from shared.persistence import PersistenceSink, SafeSink
from modules.job_client.client import JobClient
from modules.prompt_builder import CharacterDirectory, build_preview_request

logger = get_logger("preview_generator.process")


def needs_preview(segment: VideoSegment) -> bool:
    if segment.type == SegmentType.VOICEOVER:
        return False
    return not (segment.preview_image_url or segment.first_frame_image_url)


async def generate_previews(
    video: GeneratedVideo,
    image_client: JobClient,
    directory: CharacterDirectory,
    sink: Optional[PersistenceSink] = None
) -> int:
    """
    Generate a preview image for every segment that lacks one.

    Per-segment failures are logged and skipped.

    Returns:
        Number of previews generated
    """
    sink = sink if isinstance(sink, SafeSink) else SafeSink(sink)
    generated = 0
    for segment in sorted(video.segments, key=lambda s: s.index):
        if not needs_preview(segment):
            continue
        request = build_preview_request(segment, directory)
        if request is None:
            continue
        try:
            url = await image_client.run(request)
        except Exception as e:
            logger.warning(
                f"Preview generation failed for segment {segment.id}: {e}",
                extra={"story_id": video.story_id, "segment_id": segment.id, "error": str(e)}
            )
            continue
        segment.preview_image_url = url
        generated += 1
        await sink.save_segment(video.story_id, segment.id, segment.snapshot().model_dump(mode="json"))
    return generated


async def _preview_boundary(
    video: GeneratedVideo,
    image_client: JobClient,
    directory: CharacterDirectory,
    sink: Optional[PersistenceSink]
) -> int:
    try:
        generated = await generate_previews(video, image_client, directory, sink)
    except asyncio.CancelledError:
        logger.info("Preview task cancelled", extra={"story_id": video.story_id})
        raise
    except Exception as e:
        logger.error(
            f"Preview task failed: {e}",
            extra={"story_id": video.story_id, "error": str(e)},
            exc_info=True
        )
        return 0
    logger.info(
        f"Generated {generated} previews",
        extra={"story_id": video.story_id, "generated": generated}
    )
    return generated


def start_preview_task(
    video: GeneratedVideo,
    image_client: JobClient,
    directory: CharacterDirectory,
    sink: Optional[PersistenceSink] = None
) -> "asyncio.Task[int]":
    """
    Launch preview generation without awaiting it.

    The returned task never raises (other than on cancellation); callers keep
    a reference until it finishes.
    """
    return asyncio.create_task(
        _preview_boundary(video, image_client, directory, sink),
        name=f"previews-{video.story_id}"
    )
