"""
Unit tests for concatenator module.
"""
import pytest
from pathlib import Path
from unittest.mock import patch, AsyncMock

from modules.composer.concatenator import concat_assets, concatenate, write_concat_list
from shared.errors import ConcatFailed, RetryableError


class TestWriteConcatList:
    """Tests for the concat demuxer list file."""

    def test_absolute_paths_in_order(self, tmp_path):
        clips = [tmp_path / f"part_{i}.mp4" for i in range(3)]

        list_path = write_concat_list(clips, tmp_path / "list.txt")

        lines = list_path.read_text().splitlines()
        assert lines == [f"file '{clip.absolute()}'" for clip in clips]

    def test_single_quotes_escaped(self, tmp_path):
        clip = tmp_path / "anchor's desk.mp4"

        list_path = write_concat_list([clip], tmp_path / "list.txt")

        assert "anchor'\\''s desk.mp4" in list_path.read_text()


class TestConcatenate:
    """Tests for concatenate function."""

    @pytest.mark.asyncio
    @patch('modules.composer.concatenator.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_reencodes(self, mock_run_ffmpeg, tmp_path):
        output_path = tmp_path / "final.mp4"

        async def create_output_file(*args, **kwargs):
            output_path.write_bytes(b"final")

        mock_run_ffmpeg.side_effect = create_output_file
        clips = [tmp_path / "a.mp4", tmp_path / "b.mp4"]

        await concatenate(clips, output_path, tmp_path, story_id="s1")

        cmd = mock_run_ffmpeg.call_args[0][0]
        assert cmd[cmd.index("-f") + 1] == "concat"
        assert cmd[cmd.index("-safe") + 1] == "0"
        assert cmd[cmd.index("-c:v") + 1] == "libx264"
        assert cmd[cmd.index("-preset") + 1] == "veryfast"
        assert cmd[cmd.index("-crf") + 1] == "20"
        assert cmd[cmd.index("-movflags") + 1] == "+faststart"
        assert "copy" not in cmd

    @pytest.mark.asyncio
    async def test_empty_list_raises(self, tmp_path):
        with pytest.raises(ConcatFailed):
            await concatenate([], tmp_path / "final.mp4", tmp_path)

    @pytest.mark.asyncio
    @patch('modules.composer.concatenator.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_ffmpeg_failure_raises_concat_failed(self, mock_run_ffmpeg, tmp_path):
        mock_run_ffmpeg.side_effect = RetryableError("FFmpeg command failed")

        with pytest.raises(ConcatFailed):
            await concatenate([tmp_path / "a.mp4"], tmp_path / "final.mp4", tmp_path)


class TestConcatAssets:
    """Tests for concat_assets function."""

    @pytest.mark.asyncio
    @patch('modules.composer.concatenator.run_ffmpeg_command', new_callable=AsyncMock)
    async def test_fetches_in_order(self, mock_run_ffmpeg, fetcher, write_generated):
        urls = [write_generated("videos", f"{name}.mp4", size=100 + i) for i, name in enumerate(["c", "a", "b"])]
        seen_sizes = []

        async def inspect_and_create(cmd, **kwargs):
            list_path = Path(cmd[cmd.index("-i") + 1])
            for line in list_path.read_text().splitlines():
                seen_sizes.append(Path(line[6:-1]).stat().st_size)
            Path(cmd[-1]).write_bytes(b"final")

        mock_run_ffmpeg.side_effect = inspect_and_create

        url = await concat_assets(fetcher, urls, out_name="final_story-1")

        assert url == "/generated/videos/final_story-1.mp4"
        assert seen_sizes == [100, 101, 102]

    @pytest.mark.asyncio
    async def test_empty_input_raises(self, fetcher):
        with pytest.raises(ConcatFailed):
            await concat_assets(fetcher, [])
