"""
Unit tests for poster frame generation.
"""
import pytest
from unittest.mock import AsyncMock, patch

from modules.video_generator.thumbnail_generator import generate_poster_frame
from shared.errors import CompositionError


class TestGeneratePosterFrame:

    @pytest.mark.asyncio
    @patch('modules.video_generator.thumbnail_generator.check_ffmpeg_available', return_value=True)
    @patch('modules.video_generator.thumbnail_generator.snapshot_asset', new_callable=AsyncMock)
    async def test_success(self, mock_snapshot, _mock_ffmpeg):
        mock_snapshot.return_value = "/generated/thumbnails/story-1_studio_intro.png"

        url = await generate_poster_frame("https://p/x.mp4", "story-1", "studio_intro")

        assert url == "/generated/thumbnails/story-1_studio_intro.png"
        assert mock_snapshot.call_args.kwargs["out_name"] == "story-1_studio_intro"

    @pytest.mark.asyncio
    @patch('modules.video_generator.thumbnail_generator.check_ffmpeg_available', return_value=True)
    @patch('modules.video_generator.thumbnail_generator.snapshot_asset', new_callable=AsyncMock)
    async def test_failure_returns_none(self, mock_snapshot, _mock_ffmpeg):
        mock_snapshot.side_effect = CompositionError("Poster frame not created")

        assert await generate_poster_frame("https://p/x.mp4", "story-1", "studio_intro") is None

    @pytest.mark.asyncio
    @patch('modules.video_generator.thumbnail_generator.check_ffmpeg_available', return_value=False)
    @patch('modules.video_generator.thumbnail_generator.snapshot_asset', new_callable=AsyncMock)
    async def test_no_ffmpeg_skips(self, mock_snapshot, _mock_ffmpeg):
        assert await generate_poster_frame("https://p/x.mp4", "story-1", "studio_intro") is None
        mock_snapshot.assert_not_called()
