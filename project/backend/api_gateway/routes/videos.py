"""
Video generation endpoints.

Start a run for a story, read its latest state, and cancel it.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Path, status

from shared.errors import PipelineFatal
from shared.logging import get_logger
from shared.models.story import Story
from api_gateway.dependencies import RunHandle, RunRegistry, get_run_registry, get_video_service
from api_gateway.orchestrator import VideoGenerationService

logger = get_logger(__name__)

router = APIRouter()


async def run_generation(service: VideoGenerationService, handle: RunHandle) -> None:
    """Background entry point; the failure is already recorded on the video."""
    try:
        await service.run(handle.video, cancel_token=handle.cancel_token)
    except PipelineFatal as e:
        logger.error(
            f"Background generation failed: {e}",
            extra={"story_id": handle.video.story_id, "error": str(e)}
        )


@router.post("/videos", status_code=status.HTTP_202_ACCEPTED)
async def create_video(
    story: Story,
    background_tasks: BackgroundTasks,
    service: VideoGenerationService = Depends(get_video_service),
    registry: RunRegistry = Depends(get_run_registry)
):
    """
    Start generating a broadcast for a story.

    Returns:
        story_id and initial status; poll GET /api/videos/{story_id} for progress
    """
    existing = registry.get(story.story_id)
    if existing is not None and not existing.video.is_terminal:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Story {story.story_id} is already generating"
        )

    try:
        video = service.start(story)
    except PipelineFatal as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    handle = registry.register(video)
    background_tasks.add_task(run_generation, service, handle)
    logger.info(
        "Video generation queued",
        extra={"story_id": story.story_id, "segment_count": len(story.segments)}
    )
    return {"story_id": video.story_id, "status": video.status.value}


@router.get("/videos/{story_id}")
async def get_video(
    story_id: str = Path(...),
    registry: RunRegistry = Depends(get_run_registry)
):
    """Latest snapshot of a run."""
    handle = registry.get(story_id)
    if handle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return handle.video.snapshot().model_dump(mode="json")


@router.delete("/videos/{story_id}")
async def cancel_video(
    story_id: str = Path(...),
    registry: RunRegistry = Depends(get_run_registry)
):
    """Request cancellation; segments not yet finished fail as cancelled."""
    handle = registry.get(story_id)
    if handle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    if handle.video.is_terminal:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Video already {handle.video.status.value}"
        )
    handle.cancel_token.cancel("Cancelled by user")
    logger.info("Video generation cancellation requested", extra={"story_id": story_id})
    return {"story_id": story_id, "cancelled": True}
