"""
Lower-third graphics for segments that declare one.

Each graphic is one text-to-image job. When background removal is enabled the
graphic is passed through a second job; if that fails the original graphic
is kept. A failed graphic never affects segment or video status.
"""
from typing import Optional

from shared.config import settings
from shared.logging import get_logger
from shared.models.job import BackgroundRemovalRequest
from shared.models.video import GeneratedVideo, VideoSegment
from shared.persistence import PersistenceSink, SafeSink
from modules.job_client.client import JobClient
from modules.prompt_builder import build_lower_third_request

logger = get_logger("graphics_generator.process")


async def remove_background(
    removal_client: JobClient,
    segment: VideoSegment,
    story_id: str
) -> Optional[str]:
    try:
        return await removal_client.run(BackgroundRemovalRequest(image_url=segment.lower_third_url))
    except Exception as e:
        logger.warning(
            f"Background removal failed for segment {segment.id}, keeping original graphic: {e}",
            extra={"story_id": story_id, "segment_id": segment.id, "error": str(e)}
        )
        return None


async def process(
    video: GeneratedVideo,
    image_client: JobClient,
    sink: Optional[PersistenceSink] = None,
    removal_client: Optional[JobClient] = None,
    remove_backgrounds: Optional[bool] = None
) -> int:
    """
    Generate lower thirds for every segment carrying one.

    Args:
        video: Run state; `lower_third_url` is set on success
        image_client: Job client for the text-to-image provider
        sink: Persistence sink notified after each stored graphic
        removal_client: Job client for background removal
        remove_backgrounds: Override of settings.remove_lower_third_background

    Returns:
        Number of graphics generated
    """
    sink = sink if isinstance(sink, SafeSink) else SafeSink(sink)
    if remove_backgrounds is None:
        remove_backgrounds = settings.remove_lower_third_background

    segments = [s for s in video.segments if s.lower_third is not None]
    generated = 0
    for segment in segments:
        try:
            segment.lower_third_url = await image_client.run(build_lower_third_request(segment.lower_third))
        except Exception as e:
            logger.warning(
                f"Lower third failed for segment {segment.id}: {e}",
                extra={"story_id": video.story_id, "segment_id": segment.id, "error": str(e)}
            )
            continue

        if remove_backgrounds and removal_client is not None:
            cleaned = await remove_background(removal_client, segment, video.story_id)
            if cleaned:
                segment.lower_third_url = cleaned

        generated += 1
        await sink.save_segment(video.story_id, segment.id, segment.snapshot().model_dump(mode="json"))

    logger.info(
        f"Generated {generated}/{len(segments)} lower thirds",
        extra={"story_id": video.story_id, "generated": generated, "requested": len(segments)}
    )
    return generated
