"""
Pytest fixtures for composer tests.
"""
import subprocess
from pathlib import Path

import pytest

from modules.composer.downloader import MediaFetcher
from shared.models.story import Story
from shared.models.video import GeneratedVideo


@pytest.fixture
def generated_dir(tmp_path):
    """Isolated generated-media directory."""
    path = tmp_path / "generated"
    path.mkdir()
    return path


@pytest.fixture
def fetcher(generated_dir):
    """MediaFetcher rooted at the test generated dir."""
    return MediaFetcher(generated_dir=generated_dir, public_base_url="http://testserver")


@pytest.fixture
def sample_video():
    """Build a GeneratedVideo with the given segment ids."""
    def _create_video(*segment_ids: str, story_id: str = "story-1"):
        story = Story(
            story_id=story_id,
            title="Local Man Outraged",
            duration_seconds=10.0 * len(segment_ids),
            segments=[
                {"id": seg_id, "type": "b_roll" if "broll" in seg_id else "on_camera", "duration": 10}
                for seg_id in segment_ids
            ]
        )
        return GeneratedVideo.from_story(story)
    return _create_video


@pytest.fixture
def write_generated(generated_dir):
    """Place a fake asset in the generated dir and return its URL."""
    def _write(subdir: str, name: str, size: int = 2048) -> str:
        path = generated_dir / subdir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return f"/generated/{subdir}/{name}"
    return _write


def create_test_video(output_path: Path, duration: float = 1.0, width: int = 640, height: int = 360):
    """
    Create a minimal valid video file for testing.

    Generates a solid color video with no audio. Returns False if FFmpeg is
    unavailable or fails.
    """
    cmd = [
        'ffmpeg',
        '-f', 'lavfi',
        '-i', f'color=c=black:s={width}x{height}:d={duration}',
        '-c:v', 'libx264',
        '-preset', 'ultrafast',
        '-pix_fmt', 'yuv420p',
        '-y',
        str(output_path)
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=30)
        return result.returncode == 0
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return False


def create_test_audio(output_path: Path, duration: float = 1.0):
    """Create a sine-tone WAV file for testing. Returns False on failure."""
    cmd = [
        'ffmpeg',
        '-f', 'lavfi',
        '-i', f'sine=frequency=440:duration={duration}',
        '-y',
        str(output_path)
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=30)
        return result.returncode == 0
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return False


@pytest.fixture
def create_test_video_file():
    """Fixture that returns the create_test_video function."""
    return create_test_video


@pytest.fixture
def create_test_audio_file():
    """Fixture that returns the create_test_audio function."""
    return create_test_audio
