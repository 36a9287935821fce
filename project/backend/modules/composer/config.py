"""
Composer configuration.

FFmpeg settings, output encoding parameters and generated-media locations.
"""
from pathlib import Path
from typing import Optional

from shared.config import settings

# FFmpeg settings
FFMPEG_TIMEOUT = settings.ffmpeg_timeout_seconds
SNAPSHOT_TIMEOUT = 30

# Concatenation re-encode (segments come from different providers)
CONCAT_VIDEO_CODEC = "libx264"
CONCAT_PRESET = "veryfast"
CONCAT_CRF = 20
OUTPUT_AUDIO_CODEC = "aac"

# First frame is skipped slightly; some encoders emit a blank frame at t=0
SNAPSHOT_OFFSET_SECONDS = 0.05
SNAPSHOT_QUALITY = 2  # JPEG/PNG scale: 2 = high quality, 31 = low quality

# Generated media is served under this URL prefix
GENERATED_URL_PREFIX = "/generated"
VIDEOS_SUBDIR = "videos"
THUMBNAILS_SUBDIR = "thumbnails"

# Downloads smaller than this are treated as broken
MIN_MEDIA_BYTES = 64


def generated_root(generated_dir: Optional[Path] = None) -> Path:
    return Path(generated_dir or settings.generated_dir)


def generated_file(subdir: str, name: str, generated_dir: Optional[Path] = None) -> Path:
    """Filesystem path of a generated asset."""
    return generated_root(generated_dir) / subdir / name


def generated_url(subdir: str, name: str) -> str:
    """URL path under which a generated asset is served."""
    return f"{GENERATED_URL_PREFIX}/{subdir}/{name}"
