import json
from pathlib import Path

import pytest

from modules.prompt_builder.characters import CharacterDirectory
from shared.models.story import Story
from shared.models.video import GeneratedVideo

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def _load_json(name: str):
    return json.loads((FIXTURE_DIR / name).read_text())


@pytest.fixture()
def sample_story() -> Story:
    return Story.model_validate(_load_json("sample_story.json"))


@pytest.fixture()
def sample_video(sample_story) -> GeneratedVideo:
    return GeneratedVideo.from_story(sample_story)


@pytest.fixture()
def directory() -> CharacterDirectory:
    return CharacterDirectory.from_json(FIXTURE_DIR / "characters.json")
