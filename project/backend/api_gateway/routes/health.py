"""
Health check endpoint.
"""

from fastapi import APIRouter

from modules.composer.utils import check_ffmpeg_available
from shared.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness plus the optional capabilities this process has configured."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "ffmpeg": check_ffmpeg_available(),
        "supabase": settings.supabase_enabled,
    }
