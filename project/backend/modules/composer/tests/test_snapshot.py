"""
Unit tests for poster frame extraction.
"""
import pytest
from pathlib import Path
from unittest.mock import patch, AsyncMock

from modules.composer.snapshot import extract_poster_frame, snapshot_asset
from shared.errors import CompositionError, RetryableError


class TestExtractPosterFrame:
    """Tests for extract_poster_frame function."""

    @pytest.mark.asyncio
    @patch('modules.composer.snapshot.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_single_frame_command(self, mock_run_ffmpeg, tmp_path):
        output_path = tmp_path / "thumb.png"

        async def create_output_file(*args, **kwargs):
            output_path.write_bytes(b"png")

        mock_run_ffmpeg.side_effect = create_output_file

        await extract_poster_frame(tmp_path / "in.mp4", output_path)

        cmd = mock_run_ffmpeg.call_args[0][0]
        assert cmd[cmd.index("-ss") + 1] == "0.05"
        assert cmd[cmd.index("-frames:v") + 1] == "1"
        assert cmd[cmd.index("-q:v") + 1] == "2"
        assert cmd.index("-ss") < cmd.index("-i")

    @pytest.mark.asyncio
    @patch('modules.composer.snapshot.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_failure_wrapped(self, mock_run_ffmpeg, tmp_path):
        mock_run_ffmpeg.side_effect = RetryableError("FFmpeg command failed")

        with pytest.raises(CompositionError):
            await extract_poster_frame(tmp_path / "in.mp4", tmp_path / "thumb.png")


class TestSnapshotAsset:
    """Tests for snapshot_asset function."""

    @pytest.mark.asyncio
    @patch('modules.composer.snapshot.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_writes_into_thumbnails(self, mock_run_ffmpeg, fetcher, generated_dir, write_generated):
        video_url = write_generated("videos", "clip.mp4")

        async def create_output_file(cmd, **kwargs):
            Path(cmd[-1]).write_bytes(b"png")

        mock_run_ffmpeg.side_effect = create_output_file

        url = await snapshot_asset(fetcher, video_url, out_name="story-1_studio_intro")

        assert url == "/generated/thumbnails/story-1_studio_intro.png"
        assert (generated_dir / "thumbnails" / "story-1_studio_intro.png").exists()
