"""
Composition endpoints.

Direct access to the FFmpeg operations the pipeline uses: mux one segment,
snapshot a poster frame, concatenate a broadcast.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from shared.logging import get_logger
from modules.composer import MediaFetcher, concat_assets, mux_assets, snapshot_asset
from api_gateway.dependencies import get_media_fetcher

logger = get_logger(__name__)

router = APIRouter(prefix="/compose")


class MuxBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    out_name: Optional[str] = Field(default=None, alias="outName")


class SnapshotBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    out_name: Optional[str] = Field(default=None, alias="outName")


class ConcatBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    videos: Optional[List[str]] = None
    out_name: Optional[str] = Field(default=None, alias="outName")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/mux")
async def mux(body: MuxBody, fetcher: MediaFetcher = Depends(get_media_fetcher)):
    """Replace a clip's audio track; output stops at the shorter stream."""
    if not body.video_url or not body.audio_url:
        return error_response(status.HTTP_400_BAD_REQUEST, "videoUrl and audioUrl are required")
    try:
        url = await mux_assets(fetcher, body.video_url, body.audio_url, body.out_name)
    except Exception as e:
        logger.error("Mux request failed", exc_info=e, extra={"out_name": body.out_name})
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    return {"muxedUrl": url}


@router.post("/snapshot")
async def snapshot(body: SnapshotBody, fetcher: MediaFetcher = Depends(get_media_fetcher)):
    if not body.video_url:
        return error_response(status.HTTP_400_BAD_REQUEST, "videoUrl is required")
    try:
        url = await snapshot_asset(fetcher, body.video_url, body.out_name)
    except Exception as e:
        logger.error("Snapshot request failed", exc_info=e, extra={"out_name": body.out_name})
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    return {"imageUrl": url}


@router.post("/concat")
async def concat(body: ConcatBody, fetcher: MediaFetcher = Depends(get_media_fetcher)):
    """Join clips in the given order into one re-encoded MP4."""
    if not body.videos:
        return error_response(status.HTTP_400_BAD_REQUEST, "videos must be a non-empty array")
    try:
        url = await concat_assets(fetcher, body.videos, body.out_name)
    except Exception as e:
        logger.error(
            "Concat request failed",
            exc_info=e,
            extra={"out_name": body.out_name, "clip_count": len(body.videos)}
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    return {"finalUrl": url}
