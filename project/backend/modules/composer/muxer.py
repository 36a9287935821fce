"""
Per-segment muxing for composer module.

Lays a separately generated audio track over a segment's video. The video
stream is copied, the audio is re-encoded to AAC, and the output stops at the
shorter of the two streams.
"""
import time
from pathlib import Path
from typing import Optional

from shared.errors import MuxFailed
from shared.logging import get_logger
from .config import FFMPEG_TIMEOUT, OUTPUT_AUDIO_CODEC, VIDEOS_SUBDIR, generated_file, generated_url
from .downloader import MediaFetcher
from .utils import run_ffmpeg_command, safe_name, temp_directory

logger = get_logger("composer.muxer")


def build_mux_command(video_path: Path, audio_path: Path, output_path: Path) -> list:
    return [
        "ffmpeg",
        "-y",
        "-i", str(video_path),
        "-i", str(audio_path),
        "-map", "0:v:0",  # Video from first input
        "-map", "1:a:0",  # Audio from second input
        "-c:v", "copy",
        "-c:a", OUTPUT_AUDIO_CODEC,
        "-shortest",  # Truncate the longer stream, never pad
        str(output_path)
    ]


async def mux_segment(
    video_path: Path,
    audio_path: Path,
    output_path: Path,
    story_id: Optional[str] = None
) -> Path:
    """
    Combine a video file and an audio file.

    Args:
        video_path: Input video (its audio, if any, is dropped)
        audio_path: Input audio
        output_path: Destination MP4
        story_id: Story ID for logging

    Returns:
        output_path

    Raises:
        MuxFailed: If FFmpeg fails or produces no output
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        await run_ffmpeg_command(
            build_mux_command(video_path, audio_path, output_path),
            story_id=story_id,
            timeout=FFMPEG_TIMEOUT
        )
    except Exception as e:
        raise MuxFailed(f"Failed to mux {video_path.name} with {audio_path.name}: {e}", story_id=story_id) from e

    if not output_path.exists() or output_path.stat().st_size == 0:
        raise MuxFailed(f"Muxed video not created: {output_path}", story_id=story_id)
    return output_path


async def mux_assets(
    fetcher: MediaFetcher,
    video_url: str,
    audio_url: str,
    out_name: Optional[str] = None,
    story_id: Optional[str] = None
) -> str:
    """
    Mux two asset references into a generated video.

    Returns:
        URL of the muxed video under the generated media prefix

    Raises:
        MuxFailed: If either input cannot be fetched or FFmpeg fails
    """
    name = safe_name(out_name, f"mux_{int(time.time() * 1000)}") + ".mp4"
    output_path = generated_file(VIDEOS_SUBDIR, name, fetcher.generated_dir)

    async with temp_directory("mux_") as temp_dir:
        try:
            video_path = await fetcher.fetch_to_file(video_url, temp_dir / "input_video.mp4")
            audio_path = await fetcher.fetch_to_file(audio_url, temp_dir / "input_audio.wav")
        except Exception as e:
            raise MuxFailed(f"Failed to fetch mux inputs: {e}", story_id=story_id) from e
        await mux_segment(video_path, audio_path, output_path, story_id=story_id)

    logger.info(
        "Segment muxed",
        extra={"story_id": story_id, "output": output_path.name}
    )
    return generated_url(VIDEOS_SUBDIR, name)
