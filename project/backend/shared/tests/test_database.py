"""
Tests for database client.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from shared.database import DatabaseClient
from shared.errors import ConfigError, RetryableError


@pytest.fixture
def mock_supabase_client():
    client = Mock()
    client.table = Mock(return_value=Mock())
    return client


@pytest.fixture
def db_client(mock_supabase_client):
    with patch("shared.database.create_client", return_value=mock_supabase_client):
        return DatabaseClient(url="https://test.supabase.co", key="test_key")


def test_requires_credentials():
    with patch("shared.database.settings") as mock_settings:
        mock_settings.supabase_url = None
        mock_settings.supabase_service_key = None
        with pytest.raises(ConfigError):
            DatabaseClient()


def test_client_creation_failure_is_config_error():
    with patch("shared.database.create_client", side_effect=Exception("bad key")):
        with pytest.raises(ConfigError, match="bad key"):
            DatabaseClient(url="https://test.supabase.co", key="test_key")


@pytest.mark.asyncio
async def test_upsert_chain_executes(db_client, mock_supabase_client):
    builder = mock_supabase_client.table.return_value
    builder.upsert.return_value = builder
    builder.execute.return_value = Mock(data=[{"story_id": "story-1"}])

    result = await db_client.table("generated_videos").upsert({"story_id": "story-1"}, on_conflict="story_id").execute()

    assert result.data == [{"story_id": "story-1"}]
    mock_supabase_client.table.assert_called_with("generated_videos")
    builder.upsert.assert_called_once_with({"story_id": "story-1"}, on_conflict="story_id")


@pytest.mark.asyncio
async def test_execute_retries_then_raises(db_client, mock_supabase_client):
    builder = mock_supabase_client.table.return_value
    builder.select.return_value = builder
    builder.execute.side_effect = Exception("connection reset")

    with patch("shared.database.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(RetryableError, match="after 3 attempts"):
            await db_client.table("video_segments").select("*").execute()

    assert builder.execute.call_count == 3
    assert [c.args[0] for c in sleep.await_args_list] == [2, 4]
