"""
Final concatenation for composer module.

Joins segment clips with the concat demuxer and re-encodes the result, since
clips from different providers rarely share codec parameters.
"""
import time
from pathlib import Path
from typing import List, Optional

from shared.errors import ConcatFailed
from shared.logging import get_logger
from .config import (
    CONCAT_CRF,
    CONCAT_PRESET,
    CONCAT_VIDEO_CODEC,
    FFMPEG_TIMEOUT,
    OUTPUT_AUDIO_CODEC,
    VIDEOS_SUBDIR,
    generated_file,
    generated_url,
)
from .downloader import MediaFetcher
from .utils import run_ffmpeg_command, safe_name, temp_directory

logger = get_logger("composer.concatenator")


def write_concat_list(clip_paths: List[Path], list_path: Path) -> Path:
    """Concat demuxer list; single quotes in paths are escaped."""
    lines = []
    for clip_path in clip_paths:
        escaped = str(clip_path.absolute()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    list_path.write_text("\n".join(lines) + "\n")
    return list_path


async def concatenate(
    clip_paths: List[Path],
    output_path: Path,
    temp_dir: Path,
    story_id: Optional[str] = None
) -> Path:
    """
    Concatenate clips in the given order.

    Raises:
        ConcatFailed: If there is nothing to join or FFmpeg fails
    """
    if not clip_paths:
        raise ConcatFailed("No clips to concatenate", story_id=story_id)

    list_path = write_concat_list(clip_paths, temp_dir / "clips_concat.txt")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        "ffmpeg",
        "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", str(list_path),
        "-c:v", CONCAT_VIDEO_CODEC,
        "-preset", CONCAT_PRESET,
        "-crf", str(CONCAT_CRF),
        "-c:a", OUTPUT_AUDIO_CODEC,
        "-movflags", "+faststart",
        str(output_path)
    ]

    logger.info(
        f"Concatenating {len(clip_paths)} clips",
        extra={"story_id": story_id, "clip_count": len(clip_paths)}
    )
    try:
        await run_ffmpeg_command(cmd, story_id=story_id, timeout=FFMPEG_TIMEOUT)
    except Exception as e:
        raise ConcatFailed(f"Failed to concatenate clips: {e}", story_id=story_id) from e

    if not output_path.exists() or output_path.stat().st_size == 0:
        raise ConcatFailed(f"Concatenated video not created: {output_path}", story_id=story_id)
    return output_path


async def concat_assets(
    fetcher: MediaFetcher,
    video_urls: List[str],
    out_name: Optional[str] = None,
    story_id: Optional[str] = None
) -> str:
    """
    Concatenate asset references, in list order, into one generated video.

    Returns:
        URL of the final video under the generated media prefix

    Raises:
        ConcatFailed: If any input cannot be fetched or FFmpeg fails
    """
    if not video_urls:
        raise ConcatFailed("No videos to concatenate", story_id=story_id)

    name = safe_name(out_name, f"final_{int(time.time() * 1000)}") + ".mp4"
    output_path = generated_file(VIDEOS_SUBDIR, name, fetcher.generated_dir)

    async with temp_directory("concat_") as temp_dir:
        parts = []
        for i, url in enumerate(video_urls):
            try:
                parts.append(await fetcher.fetch_to_file(url, temp_dir / f"part_{i:03d}.mp4"))
            except Exception as e:
                raise ConcatFailed(f"Failed to fetch clip {i}: {e}", story_id=story_id) from e
        await concatenate(parts, output_path, temp_dir, story_id=story_id)

    return generated_url(VIDEOS_SUBDIR, name)
