"""
Poster frame extraction for composer module.
"""
import time
from pathlib import Path
from typing import Optional

from shared.errors import CompositionError
from shared.logging import get_logger
from .config import (
    SNAPSHOT_OFFSET_SECONDS,
    SNAPSHOT_QUALITY,
    SNAPSHOT_TIMEOUT,
    THUMBNAILS_SUBDIR,
    generated_file,
    generated_url,
)
from .downloader import MediaFetcher
from .utils import run_ffmpeg_command, safe_name, temp_directory

logger = get_logger("composer.snapshot")


async def extract_poster_frame(
    video_path: Path,
    output_path: Path,
    story_id: Optional[str] = None
) -> Path:
    """
    Write the first frame of a video as an image.

    Raises:
        CompositionError: If FFmpeg fails or writes nothing
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        "ffmpeg",
        "-y",
        "-ss", str(SNAPSHOT_OFFSET_SECONDS),
        "-i", str(video_path),
        "-frames:v", "1",
        "-q:v", str(SNAPSHOT_QUALITY),
        str(output_path)
    ]
    try:
        await run_ffmpeg_command(cmd, story_id=story_id, timeout=SNAPSHOT_TIMEOUT)
    except Exception as e:
        if isinstance(e, CompositionError):
            raise
        raise CompositionError(f"Failed to extract poster frame: {e}", story_id=story_id) from e

    if not output_path.exists() or output_path.stat().st_size == 0:
        raise CompositionError(f"Poster frame not created: {output_path}", story_id=story_id)
    return output_path


async def snapshot_asset(
    fetcher: MediaFetcher,
    video_url: str,
    out_name: Optional[str] = None,
    story_id: Optional[str] = None
) -> str:
    """Extract a poster frame from an asset reference and return its generated URL."""
    name = safe_name(out_name, f"thumb_{int(time.time() * 1000)}") + ".png"
    output_path = generated_file(THUMBNAILS_SUBDIR, name, fetcher.generated_dir)

    async with temp_directory("snapshot_") as temp_dir:
        video_path = await fetcher.fetch_to_file(video_url, temp_dir / "input.mp4")
        await extract_poster_frame(video_path, output_path, story_id=story_id)

    return generated_url(THUMBNAILS_SUBDIR, name)
