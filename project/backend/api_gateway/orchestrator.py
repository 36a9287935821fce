"""
Pipeline orchestrator.

Runs the four generation stages for one story: primary assets, lower-third
graphics, voiceover audio and composition. Segment failures are recorded on
the segment and never abort the run; only an unexpected error outside the
per-segment boundaries fails the whole video.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional, Set

from shared.cancellation import CancellationToken
from shared.config import settings
from shared.errors import PipelineFatal
from shared.logging import get_logger, set_story_id
from shared.models.story import Story
from shared.models.video import GeneratedVideo, VideoStatus
from shared.persistence import PersistenceSink, SafeSink
from shared.progress import ProgressCallback, ProgressReporter
from modules.composer import process as compose_video
from modules.composer.downloader import MediaFetcher
from modules.graphics_generator import process as generate_lower_thirds
from modules.job_client import JobClient, JobProvider
from modules.job_client.replicate_provider import (
    background_removal_provider,
    lower_third_provider,
    preview_image_provider,
    speech_provider,
)
from modules.job_client.sora import SoraProvider
from modules.preview_generator import start_preview_task
from modules.prompt_builder import CharacterDirectory, DurationWindows
from modules.video_generator import AssetPersister, SegmentGenerator

logger = get_logger(__name__)

# Stage boundaries reported to progress observers
STAGE_PROGRESS = {
    "Generating videos": 15,
    "Generating lower thirds": 60,
    "Generating voiceover audio": 85,
    "Composing final video": 95,
    "Complete": 100,
}
TOTAL_STEPS = 4


@dataclass
class ProviderSet:
    """One provider per generation capability."""

    video: JobProvider
    speech: JobProvider
    lower_third: JobProvider
    background_removal: Optional[JobProvider] = None
    preview_image: Optional[JobProvider] = None


def default_providers() -> ProviderSet:
    """
    Build providers from settings.

    Raises:
        ConfigError: If a required credential is missing
    """
    return ProviderSet(
        video=SoraProvider(),
        speech=speech_provider(),
        lower_third=lower_third_provider(),
        background_removal=background_removal_provider() if settings.remove_lower_third_background else None,
        preview_image=preview_image_provider() if settings.generate_previews else None,
    )


class VideoGenerationService:
    """Drives stories through the generation pipeline; holds no per-run state."""

    def __init__(
        self,
        providers: Optional[Callable[[], ProviderSet]] = None,
        directory: Optional[CharacterDirectory] = None,
        sink: Optional[PersistenceSink] = None,
        fetcher: Optional[MediaFetcher] = None,
        persister: Optional[AssetPersister] = None,
        windows: Optional[DurationWindows] = None,
        poll_interval: Optional[float] = None,
        job_timeout: Optional[float] = None,
        poster_frames: bool = True,
        previews: Optional[bool] = None
    ):
        self.providers = providers or default_providers
        self.directory = directory or CharacterDirectory()
        self.sink = SafeSink(sink)
        self.fetcher = fetcher or MediaFetcher()
        self.persister = persister
        self.windows = windows or DurationWindows.from_settings()
        self.poll_interval = poll_interval
        self.job_timeout = job_timeout
        self.poster_frames = poster_frames
        self.previews = settings.generate_previews if previews is None else previews
        self._background: Set[asyncio.Task] = set()

    def _client(self, provider: JobProvider, cancel_token: Optional[CancellationToken]) -> JobClient:
        return JobClient(
            provider,
            poll_interval=self.poll_interval,
            timeout=self.job_timeout,
            cancel_token=cancel_token
        )

    async def _save_video(self, video: GeneratedVideo) -> None:
        await self.sink.update_video_progress(video.story_id, video.snapshot().model_dump(mode="json"))

    async def _stage(self, video: GeneratedVideo, reporter: ProgressReporter, stage: str) -> None:
        percent = STAGE_PROGRESS[stage]
        video.set_progress(percent)
        await self._save_video(video)
        await reporter.report(stage, percent)
        logger.info(
            f"Stage: {stage}",
            extra={"story_id": video.story_id, "stage": stage, "progress": percent}
        )

    def _detach(self, task: asyncio.Task) -> None:
        # Keep a reference so the task is not garbage collected mid-flight
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def start(self, story: Story) -> GeneratedVideo:
        """
        Build the initial run state: one pending segment per story segment.

        Raises:
            PipelineFatal: If the state cannot be constructed
        """
        try:
            return GeneratedVideo.from_story(story)
        except Exception as e:
            raise PipelineFatal(f"Cannot build initial state: {e}", story_id=story.story_id) from e

    async def run(
        self,
        video: GeneratedVideo,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> GeneratedVideo:
        """
        Run all stages on prepared state.

        Returns:
            The same GeneratedVideo, status completed

        Raises:
            PipelineFatal: On any error outside per-segment isolation; the
                video is marked error and persisted before raising
        """
        set_story_id(video.story_id)
        reporter = ProgressReporter(progress_callback, total_steps=TOTAL_STEPS)
        start_time = time.time()
        logger.info(
            f"Starting generation for story {video.story_id}",
            extra={"story_id": video.story_id, "segment_count": len(video.segments)}
        )

        try:
            await self._save_video(video)
            providers = self.providers()

            if self.previews and providers.preview_image is not None:
                self._detach(start_preview_task(
                    video,
                    self._client(providers.preview_image, cancel_token),
                    self.directory,
                    self.sink
                ))

            generator = SegmentGenerator(
                video_client=self._client(providers.video, cancel_token),
                speech_client=self._client(providers.speech, cancel_token),
                directory=self.directory,
                sink=self.sink,
                windows=self.windows,
                persister=self.persister,
                fetcher=self.fetcher,
                poster_frames=self.poster_frames,
                cancel_token=cancel_token
            )

            await self._stage(video, reporter, "Generating videos")
            await generator.generate_primary_assets(video)

            await self._stage(video, reporter, "Generating lower thirds")
            await generate_lower_thirds(
                video,
                self._client(providers.lower_third, cancel_token),
                sink=self.sink,
                removal_client=(
                    self._client(providers.background_removal, cancel_token)
                    if providers.background_removal is not None else None
                )
            )

            await self._stage(video, reporter, "Generating voiceover audio")
            await generator.generate_voiceover_audio(video)

            await self._stage(video, reporter, "Composing final video")
            await compose_video(video, fetcher=self.fetcher, sink=self.sink)

            video.transition(VideoStatus.COMPLETED)
            await self._stage(video, reporter, "Complete")
        except Exception as e:
            fatal = e if isinstance(e, PipelineFatal) else PipelineFatal(str(e) or e.__class__.__name__, story_id=video.story_id)
            if video.status == VideoStatus.GENERATING:
                video.transition(VideoStatus.ERROR, error=str(fatal))
            await self._save_video(video)
            logger.error(
                f"Generation failed for story {video.story_id}: {fatal}",
                exc_info=e,
                extra={"story_id": video.story_id, "error_type": e.__class__.__name__}
            )
            if fatal is e:
                raise
            raise fatal from e

        failed = [s.id for s in video.segments if s.error]
        logger.info(
            f"Generation completed for story {video.story_id}",
            extra={
                "story_id": video.story_id,
                "final_video_url": video.final_video_url,
                "failed_segments": failed,
                "duration_seconds": round(time.time() - start_time, 2)
            }
        )
        return video

    async def generate_video(
        self,
        story: Story,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> GeneratedVideo:
        """Generate a broadcast for a story; see `run`."""
        return await self.run(self.start(story), cancel_token, progress_callback)

    async def wait_for_background(self) -> None:
        """Wait for detached tasks (previews) started by earlier runs."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
