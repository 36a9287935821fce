"""
Per-segment generation driver.

Each segment moves pending -> generating -> completed | error. Segments are
processed one at a time; a failing segment records its error and the batch
moves on. The persistence sink sees a snapshot after every transition.
"""
import random
from typing import Callable, List, Optional

from shared.cancellation import CancellationToken
from shared.errors import JobCancelled
from shared.logging import get_logger
from shared.models.story import SegmentType
from shared.models.video import GeneratedVideo, SegmentStatus, VideoSegment
from shared.persistence import PersistenceSink, SafeSink
from modules.composer.downloader import MediaFetcher
from modules.job_client.client import JobClient
from modules.prompt_builder import (
    CharacterDirectory,
    DurationWindows,
    build_speech_request,
    build_video_request,
    produces_video,
)
from modules.video_generator.asset_store import AssetPersister
from modules.video_generator.config import B_ROLL_TYPES, ON_CAMERA_TYPES
from modules.video_generator.thumbnail_generator import generate_poster_frame

logger = get_logger("video_generator.generator")


def error_message(error: Exception) -> str:
    """Human-readable message stored on a failed segment."""
    return str(error) or error.__class__.__name__


def random_seed() -> int:
    return random.randint(0, 2**31 - 1)


class SegmentGenerator:
    """Drives primary video and voiceover audio generation for one run."""

    def __init__(
        self,
        video_client: JobClient,
        speech_client: JobClient,
        directory: CharacterDirectory,
        sink: Optional[PersistenceSink] = None,
        windows: Optional[DurationWindows] = None,
        persister: Optional[AssetPersister] = None,
        fetcher: Optional[MediaFetcher] = None,
        poster_frames: bool = True,
        cancel_token: Optional[CancellationToken] = None,
        seed_factory: Callable[[], int] = random_seed
    ):
        self.video_client = video_client
        self.speech_client = speech_client
        self.directory = directory
        self.sink = sink if isinstance(sink, SafeSink) else SafeSink(sink)
        self.windows = windows or DurationWindows.from_settings()
        self.persister = persister
        self.fetcher = fetcher
        self.poster_frames = poster_frames
        self.cancel_token = cancel_token
        self.seed_factory = seed_factory

    async def _save(self, video: GeneratedVideo, segment: VideoSegment) -> None:
        await self.sink.save_segment(
            video.story_id,
            segment.id,
            segment.snapshot().model_dump(mode="json")
        )

    async def _fail(self, video: GeneratedVideo, segment: VideoSegment, error: Exception) -> None:
        message = error_message(error)
        segment.fail(message)
        logger.error(
            f"Segment {segment.id} failed: {message}",
            extra={
                "story_id": video.story_id,
                "segment_id": segment.id,
                "segment_type": segment.type.value,
                "error_type": error.__class__.__name__
            }
        )
        await self._save(video, segment)

    def _cancelled(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled

    async def _persist(self, url: str, kind: str, video: GeneratedVideo, segment: VideoSegment) -> str:
        if self.persister is None:
            return url
        durable = await self.persister.persist(url, kind, video.story_id, segment.id)
        return durable or url

    @staticmethod
    def primary_order(video: GeneratedVideo) -> List[VideoSegment]:
        """On-camera segments first, then b-roll and illustrated voiceovers; story order within each."""
        ordered = sorted(video.segments, key=lambda s: s.index)
        on_camera = [s for s in ordered if s.type in ON_CAMERA_TYPES]
        b_roll = [s for s in ordered if s.type in B_ROLL_TYPES and produces_video(s)]
        return on_camera + b_roll

    async def generate_primary_assets(self, video: GeneratedVideo) -> None:
        """
        Stage 1: generate the video for every segment that has one.

        Voiceover segments that get b-roll stay `generating` on success; their
        terminal status is decided once their audio is produced.
        """
        segments = self.primary_order(video)
        logger.info(
            f"Generating primary assets for {len(segments)} segments",
            extra={"story_id": video.story_id, "segment_count": len(segments)}
        )
        for segment in segments:
            if segment.status != SegmentStatus.PENDING:
                continue
            if self._cancelled():
                await self._fail(video, segment, JobCancelled(reason=self.cancel_token.reason))
                continue
            await self._generate_video(video, segment)

    async def _generate_video(self, video: GeneratedVideo, segment: VideoSegment) -> None:
        segment.transition(SegmentStatus.GENERATING)
        await self._save(video, segment)

        try:
            request = build_video_request(segment, self.directory, self.windows)
            logger.info(
                f"Generating {segment.type.value} video for segment {segment.id}",
                extra={
                    "story_id": video.story_id,
                    "segment_id": segment.id,
                    "duration": request.duration,
                    "reference_images": len(request.reference_image_urls)
                }
            )
            url = await self.video_client.run(request)
            segment.video_url = await self._persist(url, "video", video, segment)

            if self.poster_frames:
                poster = await generate_poster_frame(
                    segment.video_url, video.story_id, segment.id, fetcher=self.fetcher
                )
                if poster:
                    segment.first_frame_image_url = poster
        except Exception as e:
            await self._fail(video, segment, e)
            return

        if segment.type != SegmentType.VOICEOVER:
            segment.transition(SegmentStatus.COMPLETED)
        await self._save(video, segment)
        logger.info(
            f"Segment {segment.id} video ready",
            extra={"story_id": video.story_id, "segment_id": segment.id, "status": segment.status.value}
        )

    async def generate_voiceover_audio(self, video: GeneratedVideo) -> None:
        """
        Stage 3: text-to-speech for every voiceover segment not already failed.
        """
        segments = [
            s for s in sorted(video.segments, key=lambda s: s.index)
            if s.type == SegmentType.VOICEOVER and not s.is_terminal
        ]
        logger.info(
            f"Generating voiceover audio for {len(segments)} segments",
            extra={"story_id": video.story_id, "segment_count": len(segments)}
        )
        for segment in segments:
            if self._cancelled():
                await self._fail(video, segment, JobCancelled(reason=self.cancel_token.reason))
                continue
            await self._generate_audio(video, segment)

    async def _generate_audio(self, video: GeneratedVideo, segment: VideoSegment) -> None:
        if segment.status == SegmentStatus.PENDING:
            segment.transition(SegmentStatus.GENERATING)
            await self._save(video, segment)

        try:
            request = build_speech_request(segment, self.directory, seed=self.seed_factory())
            url = await self.speech_client.run(request)
            segment.audio_url = await self._persist(url, "audio", video, segment)
        except Exception as e:
            await self._fail(video, segment, e)
            return

        segment.transition(SegmentStatus.COMPLETED)
        await self._save(video, segment)
        logger.info(
            f"Segment {segment.id} voiceover ready",
            extra={"story_id": video.story_id, "segment_id": segment.id}
        )
