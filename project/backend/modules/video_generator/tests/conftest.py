"""
Pytest fixtures for video generator tests.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from modules.prompt_builder import CharacterDirectory, DurationWindow, DurationWindows
from modules.prompt_builder.characters import Character
from shared.models.story import Story
from shared.models.video import GeneratedVideo
from shared.persistence import InMemorySink


@pytest.fixture
def broadcast_story():
    """Two studio segments, a field report, a witness and a b-roll."""
    return Story(
        story_id="story-42",
        title="Mayor Declares Mondays Optional",
        duration_seconds=50,
        segments=[
            {"id": "studio_intro", "type": "veo3", "character": "Dana Kingsley", "dialog": "Good evening."},
            {"id": "broll_city_hall", "type": "runway", "visual_description": "City hall at dawn"},
            {"id": "field_reporter_1", "type": "veo3", "character": "Max Fields", "dialog": "I'm here live."},
            {"id": "witness_1", "type": "veo3", "character": "Local Resident", "dialog": "Finally."},
            {"id": "studio_outro", "type": "veo3", "character": "Ron Tate", "dialog": "Good night."},
        ]
    )


@pytest.fixture
def voiceover_story():
    return Story(
        story_id="story-vo",
        title="Voiceover",
        segments=[
            {"id": "studio_intro", "type": "veo3", "character": "Dana Kingsley", "dialog": "Hello."},
            {"id": "vo_skyline", "type": "tts_voiceover", "character": "Ron Tate",
             "voiceover_script": "The skyline tells its own story.", "visual_description": "Skyline at dusk"},
            {"id": "vo_plain", "type": "tts_voiceover", "voiceover_script": "And that's the news."},
        ]
    )


@pytest.fixture
def directory():
    return CharacterDirectory([
        Character(id="dana", name="Dana Kingsley", tag="@anchor1", role="Anchor",
                  image_url="https://cdn.example.com/dana.png", voice_file="female-anchor.wav"),
        Character(id="ron", name="Ron Tate", tag="@anchor2", role="Co-Anchor", voice_file="male-anchor.wav"),
    ])


@pytest.fixture
def windows():
    return DurationWindows(on_camera=DurationWindow(6, 10, 12), b_roll=DurationWindow(5, 5, 10))


@pytest.fixture
def sink():
    return InMemorySink()


@pytest.fixture
def video_client():
    """JobClient stand-in; run() returns a URL per request."""
    client = MagicMock()
    client.run = AsyncMock(side_effect=lambda request: f"https://provider.example.com/{abs(hash(request.prompt))}.mp4")
    return client


@pytest.fixture
def speech_client():
    client = MagicMock()
    client.run = AsyncMock(return_value="https://provider.example.com/voice.wav")
    return client


@pytest.fixture
def make_video():
    return GeneratedVideo.from_story
