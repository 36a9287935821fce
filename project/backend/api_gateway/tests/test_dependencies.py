"""
Tests for the run registry and sink wiring.
"""
from unittest.mock import patch

from shared.models.video import GeneratedVideo, VideoStatus
from shared.persistence import InMemorySink, JsonFileSink
from api_gateway.dependencies import RunRegistry, build_sink


def make_video(story, story_id, status=VideoStatus.GENERATING):
    video = GeneratedVideo.from_story(story).model_copy(update={"story_id": story_id})
    if status != VideoStatus.GENERATING:
        video.transition(status)
    return video


class TestRunRegistry:

    def test_finished_runs_evicted_oldest_first(self, story):
        registry = RunRegistry(max_finished=2)
        for n in range(4):
            registry.register(make_video(story, f"done-{n}", VideoStatus.COMPLETED))

        assert len(registry) == 2
        assert registry.get("done-0") is None
        assert registry.get("done-1") is None
        assert registry.get("done-3") is not None

    def test_running_handles_never_evicted(self, story):
        registry = RunRegistry(max_finished=0)
        running = registry.register(make_video(story, "live"))
        registry.register(make_video(story, "done", VideoStatus.ERROR))

        assert registry.get("live") is running
        assert registry.get("done") is None

    def test_run_finishing_later_is_evicted_on_next_register(self, story):
        registry = RunRegistry(max_finished=1)
        first = registry.register(make_video(story, "first"))
        registry.register(make_video(story, "second", VideoStatus.COMPLETED))

        first.video.transition(VideoStatus.COMPLETED)
        registry.register(make_video(story, "third"))

        assert registry.get("first") is None
        assert registry.get("second") is not None
        assert registry.get("third") is not None

    def test_reregistering_replaces_handle(self, story):
        registry = RunRegistry()
        old = registry.register(make_video(story, "story-fixture", VideoStatus.COMPLETED))
        new = registry.register(make_video(story, "story-fixture"))

        assert registry.get("story-fixture") is new
        assert new is not old
        assert len(registry) == 1


class TestBuildSink:

    def test_no_in_memory_copy_of_run_state(self):
        with patch("api_gateway.dependencies.settings") as settings:
            settings.state_dir = None
            settings.supabase_enabled = False
            sink = build_sink()

        assert sink.sinks == []

    def test_state_dir_adds_file_sink(self, tmp_path):
        with patch("api_gateway.dependencies.settings") as settings:
            settings.state_dir = str(tmp_path)
            settings.supabase_enabled = False
            sink = build_sink()

        inner = [s.inner for s in sink.sinks]
        assert len(inner) == 1
        assert isinstance(inner[0], JsonFileSink)
        assert not any(isinstance(s, InMemorySink) for s in inner)
