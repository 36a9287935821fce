"""
Pytest fixtures for API gateway tests.
"""
import json
from pathlib import Path

import pytest

from modules.job_client.base import JobProvider
from modules.prompt_builder import CharacterDirectory, DurationWindow, DurationWindows
from shared.errors import JobCreationFailed
from shared.models.job import JobSnapshot, JobStatus
from shared.models.story import Story
from shared.persistence import InMemorySink
from api_gateway.orchestrator import ProviderSet, VideoGenerationService

STORY_FIXTURE = (
    Path(__file__).parent.parent.parent / "modules" / "prompt_builder" / "tests" / "fixtures" / "sample_story.json"
)


class FakeProvider(JobProvider):
    """Completes every job on the first poll unless `reject` matches the request."""

    def __init__(self, name, reject=None, fail=None):
        self.name = name
        self.reject = reject
        self.fail = fail
        self.requests = []
        self._count = 0

    async def create(self, request):
        self.requests.append(request)
        if self.reject is not None and self.reject(request):
            raise JobCreationFailed(500, "internal error", provider=self.name)
        self._count += 1
        return JobSnapshot(job_id=f"{self.name}-{self._count}", status=JobStatus.QUEUED)

    async def status(self, job_id):
        if self.fail is not None and self.fail(job_id):
            return JobSnapshot(job_id=job_id, status=JobStatus.FAILED, error="content policy")
        return JobSnapshot(job_id=job_id, status=JobStatus.COMPLETED)

    async def fetch(self, snapshot):
        return f"https://{self.name}.example.com/{snapshot.job_id}"


class RecordingSink(InMemorySink):
    """Keeps every video-level save in order."""

    def __init__(self):
        super().__init__()
        self.video_history = []

    async def update_video_progress(self, story_id, video_state):
        self.video_history.append((video_state["status"], video_state["progress"]))
        await super().update_video_progress(story_id, video_state)


@pytest.fixture
def story():
    return Story(**json.loads(STORY_FIXTURE.read_text()))


@pytest.fixture
def providers():
    return ProviderSet(
        video=FakeProvider("video"),
        speech=FakeProvider("speech"),
        lower_third=FakeProvider("graphics"),
        preview_image=FakeProvider("preview"),
    )


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_service(providers, sink):
    """Service wired to fake providers; keyword overrides pass through."""
    def _make(**kwargs):
        options = dict(
            providers=lambda: providers,
            directory=CharacterDirectory(),
            sink=sink,
            windows=DurationWindows(on_camera=DurationWindow(6, 10, 12), b_roll=DurationWindow(5, 5, 10)),
            poll_interval=0.01,
            job_timeout=1.0,
            poster_frames=False,
            previews=False,
        )
        options.update(kwargs)
        return VideoGenerationService(**options)
    return _make


@pytest.fixture
def fake_provider():
    """The FakeProvider class, for tests that swap one provider out."""
    return FakeProvider
