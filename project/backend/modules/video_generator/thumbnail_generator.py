"""
Poster frames for generated segment videos.

Extracts the first frame with FFmpeg into the generated thumbnails directory.
This is a non-blocking operation: any failure is logged and yields None.
"""
from typing import Optional

from shared.logging import get_logger
from modules.composer.downloader import MediaFetcher
from modules.composer.snapshot import snapshot_asset
from modules.composer.utils import check_ffmpeg_available

logger = get_logger("video_generator.thumbnail_generator")


async def generate_poster_frame(
    video_url: str,
    story_id: str,
    segment_id: str,
    fetcher: Optional[MediaFetcher] = None
) -> Optional[str]:
    """
    Generate a poster frame for a segment video.

    Args:
        video_url: Segment video reference
        story_id: Story ID for logging and file naming
        segment_id: Segment ID for file naming

    Returns:
        Poster frame URL if successful, None otherwise
    """
    if not check_ffmpeg_available():
        logger.warning(
            "FFmpeg not available, skipping poster frame",
            extra={"story_id": story_id, "segment_id": segment_id}
        )
        return None

    try:
        url = await snapshot_asset(
            fetcher or MediaFetcher(),
            video_url,
            out_name=f"{story_id}_{segment_id}",
            story_id=story_id
        )
    except Exception as e:
        logger.warning(
            f"Poster frame generation failed: {e}",
            extra={"story_id": story_id, "segment_id": segment_id, "error": str(e)}
        )
        return None

    logger.debug(
        "Poster frame generated",
        extra={"story_id": story_id, "segment_id": segment_id, "thumbnail_url": url}
    )
    return url
