"""
Main entry point for composer module.

Two strictly ordered steps: mux every segment that carries separately
generated audio, then concatenate all segment clips in story order into the
final broadcast.
"""
import time
from typing import List, Optional

from shared.errors import ConcatFailed, MuxFailed
from shared.logging import get_logger
from shared.models.video import GeneratedVideo, VideoSegment
from shared.persistence import PersistenceSink, SafeSink

from .concatenator import concat_assets
from .downloader import MediaFetcher
from .muxer import mux_assets
from .utils import check_ffmpeg_available

logger = get_logger("composer.process")


def concat_inputs(segments: List[VideoSegment]) -> List[VideoSegment]:
    """Segments with a video, in original story order."""
    ordered = sorted(segments, key=lambda s: s.index)
    return [segment for segment in ordered if segment.video_url]


async def mux_segments(
    video: GeneratedVideo,
    fetcher: MediaFetcher,
    sink: PersistenceSink
) -> int:
    """
    Mux audio onto every segment that has both a video and an audio URL.

    A failed mux leaves the segment's original video in place.

    Returns:
        Number of segments muxed
    """
    muxed = 0
    for segment in video.segments:
        if not (segment.video_url and segment.audio_url):
            continue
        try:
            segment.video_url = await mux_assets(
                fetcher,
                segment.video_url,
                segment.audio_url,
                out_name=f"{video.story_id}_{segment.id}",
                story_id=video.story_id
            )
            muxed += 1
        except MuxFailed as e:
            logger.warning(
                f"Mux failed for segment {segment.id}, keeping unmuxed video: {e}",
                extra={"story_id": video.story_id, "segment_id": segment.id, "error": str(e)}
            )
            continue
        await sink.save_segment(video.story_id, segment.id, segment.snapshot().model_dump(mode="json"))
    return muxed


async def concatenate_segments(video: GeneratedVideo, fetcher: MediaFetcher) -> Optional[str]:
    """
    Join segment videos in story order.

    Returns:
        Final video URL, the last available segment video if concatenation
        fails, or None when no segment has a video
    """
    inputs = concat_inputs(video.segments)
    if not inputs:
        logger.warning(
            "No segment videos available, skipping final concatenation",
            extra={"story_id": video.story_id}
        )
        return None

    try:
        return await concat_assets(
            fetcher,
            [segment.video_url for segment in inputs],
            out_name=f"final_{video.story_id}",
            story_id=video.story_id
        )
    except ConcatFailed as e:
        fallback = inputs[-1]
        logger.warning(
            f"Concatenation failed, using segment {fallback.id} as final video: {e}",
            extra={"story_id": video.story_id, "segment_id": fallback.id, "error": str(e)}
        )
        return fallback.video_url


async def process(
    video: GeneratedVideo,
    fetcher: Optional[MediaFetcher] = None,
    sink: Optional[PersistenceSink] = None
) -> Optional[str]:
    """
    Compose the final broadcast for a run.

    Mux and concat failures degrade gracefully and never raise. Segment video
    URLs are updated in place when muxing succeeds; `video.final_video_url` is
    set when any segment produced a video.

    Args:
        video: Run state, segments in story order
        fetcher: Media fetcher (default: one rooted at the generated dir)
        sink: Persistence sink notified of muxed segments

    Returns:
        Final video URL or None
    """
    fetcher = fetcher or MediaFetcher()
    sink = sink if isinstance(sink, SafeSink) else SafeSink(sink)
    start_time = time.time()

    if not check_ffmpeg_available():
        logger.warning(
            "FFmpeg not found in PATH; composition will fall back to unmuxed clips",
            extra={"story_id": video.story_id}
        )

    muxed = await mux_segments(video, fetcher, sink)
    final_url = await concatenate_segments(video, fetcher)
    if final_url:
        video.final_video_url = final_url

    logger.info(
        "Composition finished",
        extra={
            "story_id": video.story_id,
            "muxed_segments": muxed,
            "final_video_url": final_url,
            "duration_seconds": round(time.time() - start_time, 2)
        }
    )
    return final_url
