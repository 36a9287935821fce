"""
FastAPI dependencies.

Process-wide generation service, persistence sinks, and the registry of runs
started through the API.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from shared.cancellation import CancellationToken
from shared.config import settings
from shared.logging import get_logger
from shared.models.video import GeneratedVideo
from shared.persistence import CompositeSink, JsonFileSink, PersistenceSink, SupabaseSink
from modules.composer.downloader import MediaFetcher
from modules.prompt_builder import CharacterDirectory
from modules.video_generator import AssetPersister
from api_gateway.orchestrator import VideoGenerationService

logger = get_logger(__name__)


@dataclass
class RunHandle:
    """A run started through the API; `video` is the live, mutating state."""

    video: GeneratedVideo
    cancel_token: CancellationToken = field(default_factory=CancellationToken)


class RunRegistry:
    """
    In-process index of runs by story id.

    Running handles are always kept. Finished ones are evicted oldest first once
    more than `max_finished` of them are held.
    """

    def __init__(self, max_finished: Optional[int] = None):
        self.max_finished = max_finished if max_finished is not None else settings.max_finished_runs
        self._runs: Dict[str, RunHandle] = {}

    def register(self, video: GeneratedVideo) -> RunHandle:
        handle = RunHandle(video=video)
        # re-registering a story moves it to the newest position
        self._runs.pop(video.story_id, None)
        self._runs[video.story_id] = handle
        self._evict_finished()
        return handle

    def _evict_finished(self) -> None:
        finished = [story_id for story_id, handle in self._runs.items() if handle.video.is_terminal]
        excess = len(finished) - self.max_finished
        for story_id in finished[:max(excess, 0)]:
            del self._runs[story_id]
        if excess > 0:
            logger.debug("Evicted finished runs", extra={"evicted": excess, "retained": len(self._runs)})

    def __len__(self) -> int:
        return len(self._runs)

    def get(self, story_id: str) -> Optional[RunHandle]:
        return self._runs.get(story_id)

    def clear(self) -> None:
        self._runs.clear()


_service: Optional[VideoGenerationService] = None
_registry = RunRegistry()


def build_sink() -> PersistenceSink:
    """File and Supabase sinks when configured; live state is read from the run registry."""
    sinks = []
    if settings.state_dir:
        sinks.append(JsonFileSink(Path(settings.state_dir)))
    if settings.supabase_enabled:
        sinks.append(SupabaseSink())
    return CompositeSink(*sinks)


def build_directory() -> CharacterDirectory:
    if settings.characters_file:
        return CharacterDirectory.from_json(Path(settings.characters_file))
    return CharacterDirectory()


def get_video_service() -> VideoGenerationService:
    """Lazily built service shared by every request."""
    global _service
    if _service is None:
        persister = AssetPersister() if settings.persist_assets else None
        _service = VideoGenerationService(
            directory=build_directory(),
            sink=build_sink(),
            fetcher=MediaFetcher(),
            persister=persister
        )
        logger.info(
            "Video generation service initialized",
            extra={"persist_assets": settings.persist_assets, "state_dir": settings.state_dir}
        )
    return _service


def get_run_registry() -> RunRegistry:
    return _registry


def get_media_fetcher() -> MediaFetcher:
    return MediaFetcher()
