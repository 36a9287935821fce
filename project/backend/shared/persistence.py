"""
Persistence sinks.

The pipeline hands a snapshot to the sink after every segment transition so a
caller can resume after a crash or reload. Writes are keyed by story and
segment id and are last-write-wins, so re-saving the same snapshot is a no-op.
"""

import asyncio
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from shared.database import DatabaseClient
from shared.logging import get_logger

logger = get_logger("persistence")

State = Dict[str, Any]


class PersistenceSink(ABC):
    """Receives segment and video state snapshots."""

    @abstractmethod
    async def save_segment(self, story_id: str, segment_id: str, state: State) -> None:
        """Store the latest state of one segment."""

    @abstractmethod
    async def update_video_progress(self, story_id: str, video_state: State) -> None:
        """Store the latest state of a whole run."""


class SafeSink(PersistenceSink):
    """Wraps a sink so that its failures are logged and never raised."""

    def __init__(self, inner: Optional[PersistenceSink]):
        self.inner = inner

    async def save_segment(self, story_id: str, segment_id: str, state: State) -> None:
        if self.inner is None:
            return
        try:
            await self.inner.save_segment(story_id, segment_id, state)
        except Exception as e:
            logger.warning(
                f"Failed to persist segment {segment_id}: {e}",
                extra={"story_id": story_id, "segment_id": segment_id, "error": str(e)}
            )

    async def update_video_progress(self, story_id: str, video_state: State) -> None:
        if self.inner is None:
            return
        try:
            await self.inner.update_video_progress(story_id, video_state)
        except Exception as e:
            logger.warning(
                f"Failed to persist video progress: {e}",
                extra={"story_id": story_id, "error": str(e)}
            )


class InMemorySink(PersistenceSink):
    """Dictionary-backed sink used by the HTTP API and tests."""

    def __init__(self):
        self.segments: Dict[Tuple[str, str], State] = {}
        self.videos: Dict[str, State] = {}

    async def save_segment(self, story_id: str, segment_id: str, state: State) -> None:
        self.segments[(story_id, segment_id)] = json.loads(json.dumps(state, default=str))

    async def update_video_progress(self, story_id: str, video_state: State) -> None:
        self.videos[story_id] = json.loads(json.dumps(video_state, default=str))

    def get_segment(self, story_id: str, segment_id: str) -> Optional[State]:
        return self.segments.get((story_id, segment_id))

    def get_video(self, story_id: str) -> Optional[State]:
        return self.videos.get(story_id)


class JsonFileSink(PersistenceSink):
    """One JSON document per segment and per story under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def segment_path(self, story_id: str, segment_id: str) -> Path:
        return self.directory / f"video_segment_{story_id}_{segment_id}.json"

    def video_path(self, story_id: str) -> Path:
        return self.directory / f"story_{story_id}.json"

    @staticmethod
    def _write_atomic(path: Path, state: State) -> None:
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(state, default=str, sort_keys=True, indent=2))
        os.replace(tmp_path, path)

    async def _write(self, path: Path, state: State) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_atomic, path, state)

    async def save_segment(self, story_id: str, segment_id: str, state: State) -> None:
        await self._write(self.segment_path(story_id, segment_id), state)

    async def update_video_progress(self, story_id: str, video_state: State) -> None:
        await self._write(self.video_path(story_id), video_state)

    def load_video(self, story_id: str) -> Optional[State]:
        path = self.video_path(story_id)
        if not path.exists():
            return None
        return json.loads(path.read_text())


class SupabaseSink(PersistenceSink):
    """Upserts state rows into `video_segments` and `generated_videos`."""

    SEGMENTS_TABLE = "video_segments"
    VIDEOS_TABLE = "generated_videos"

    def __init__(self, db_client: Optional[DatabaseClient] = None):
        self.db = db_client or DatabaseClient()

    async def save_segment(self, story_id: str, segment_id: str, state: State) -> None:
        row = {
            "story_id": story_id,
            "segment_id": segment_id,
            "status": state.get("status"),
            "state": state,
            "updated_at": "now()",
        }
        await self.db.table(self.SEGMENTS_TABLE).upsert(
            row, on_conflict="story_id,segment_id"
        ).execute()

    async def update_video_progress(self, story_id: str, video_state: State) -> None:
        row = {
            "story_id": story_id,
            "status": video_state.get("status"),
            "progress": video_state.get("progress"),
            "final_video_url": video_state.get("final_video_url"),
            "state": video_state,
            "updated_at": "now()",
        }
        await self.db.table(self.VIDEOS_TABLE).upsert(row, on_conflict="story_id").execute()


class CompositeSink(PersistenceSink):
    """Forwards every write to each inner sink; one failing sink does not starve the others."""

    def __init__(self, *sinks: PersistenceSink):
        self.sinks = [SafeSink(sink) for sink in sinks if sink is not None]

    async def save_segment(self, story_id: str, segment_id: str, state: State) -> None:
        for sink in self.sinks:
            await sink.save_segment(story_id, segment_id, state)

    async def update_video_progress(self, story_id: str, video_state: State) -> None:
        for sink in self.sinks:
            await sink.update_video_progress(story_id, video_state)
