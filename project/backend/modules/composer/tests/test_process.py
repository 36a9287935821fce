"""
Unit tests for composer process.
"""
import pytest
from unittest.mock import patch, AsyncMock

from modules.composer.process import concat_inputs, process
from shared.errors import ConcatFailed, MuxFailed
from shared.persistence import InMemorySink


class TestConcatInputs:
    """Final concat input ordering."""

    def test_story_order_after_filtering(self, sample_video):
        video = sample_video("studio_intro", "broll_city", "field_reporter_1", "witness_1", "studio_outro")
        video.segments[0].video_url = "/generated/videos/0.mp4"
        video.segments[2].video_url = "/generated/videos/2.mp4"
        video.segments[4].video_url = "/generated/videos/4.mp4"
        # Generation finished out of order
        shuffled = [video.segments[4], video.segments[0], video.segments[3], video.segments[2], video.segments[1]]

        inputs = concat_inputs(shuffled)

        assert [s.index for s in inputs] == [0, 2, 4]


class TestProcess:
    """Tests for process function."""

    @pytest.mark.asyncio
    @patch('modules.composer.process.concat_assets', new_callable=AsyncMock)
    @patch('modules.composer.process.mux_assets', new_callable=AsyncMock)
    async def test_mux_then_concat(self, mock_mux, mock_concat, sample_video, fetcher):
        video = sample_video("studio_intro", "broll_city")
        video.segments[0].video_url = "/generated/videos/studio.mp4"
        video.segments[1].video_url = "https://cdn.example.com/broll.mp4"
        video.segments[1].audio_url = "https://cdn.example.com/voice.wav"
        mock_mux.return_value = "/generated/videos/story-1_broll_city.mp4"
        mock_concat.return_value = "/generated/videos/final_story-1.mp4"
        sink = InMemorySink()

        final_url = await process(video, fetcher=fetcher, sink=sink)

        assert final_url == "/generated/videos/final_story-1.mp4"
        assert video.final_video_url == final_url
        mock_mux.assert_called_once()
        assert mock_mux.call_args.kwargs["out_name"] == "story-1_broll_city"
        assert mock_concat.call_args[0][1] == [
            "/generated/videos/studio.mp4",
            "/generated/videos/story-1_broll_city.mp4",
        ]
        assert sink.get_segment("story-1", "broll_city")["video_url"] == "/generated/videos/story-1_broll_city.mp4"

    @pytest.mark.asyncio
    @patch('modules.composer.process.concat_assets', new_callable=AsyncMock)
    @patch('modules.composer.process.mux_assets', new_callable=AsyncMock)
    async def test_mux_failure_keeps_original_video(self, mock_mux, mock_concat, sample_video, fetcher):
        video = sample_video("broll_city")
        video.segments[0].video_url = "https://cdn.example.com/broll.mp4"
        video.segments[0].audio_url = "https://cdn.example.com/voice.wav"
        mock_mux.side_effect = MuxFailed("FFmpeg command failed")
        mock_concat.return_value = "/generated/videos/final_story-1.mp4"

        await process(video, fetcher=fetcher)

        assert video.segments[0].video_url == "https://cdn.example.com/broll.mp4"
        assert mock_concat.call_args[0][1] == ["https://cdn.example.com/broll.mp4"]

    @pytest.mark.asyncio
    @patch('modules.composer.process.concat_assets', new_callable=AsyncMock)
    async def test_concat_failure_falls_back_to_last_video(self, mock_concat, sample_video, fetcher):
        video = sample_video("studio_intro", "broll_city", "studio_outro")
        video.segments[0].video_url = "/generated/videos/a.mp4"
        video.segments[1].video_url = "/generated/videos/b.mp4"
        mock_concat.side_effect = ConcatFailed("Failed to concatenate clips")

        final_url = await process(video, fetcher=fetcher)

        assert final_url == "/generated/videos/b.mp4"
        assert video.final_video_url == "/generated/videos/b.mp4"

    @pytest.mark.asyncio
    @patch('modules.composer.process.concat_assets', new_callable=AsyncMock)
    async def test_no_videos_leaves_final_unset(self, mock_concat, sample_video, fetcher):
        video = sample_video("studio_intro", "broll_city")

        final_url = await process(video, fetcher=fetcher)

        assert final_url is None
        assert video.final_video_url is None
        mock_concat.assert_not_called()
