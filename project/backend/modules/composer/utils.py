"""
Utility functions for composer module.

FFmpeg command execution, duration probing, and availability checks.
"""
import asyncio
import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from shared.errors import CompositionError, RetryableError
from shared.retry import retry_with_backoff
from shared.logging import get_logger

logger = get_logger("composer.utils")


def check_ffmpeg_available() -> bool:
    """
    Check if FFmpeg is installed and available in PATH.

    Returns:
        True if FFmpeg is available, False otherwise
    """
    return shutil.which("ffmpeg") is not None


@asynccontextmanager
async def temp_directory(prefix: str):
    """
    Context manager for temporary directory with automatic cleanup.

    Args:
        prefix: Prefix for temp directory name

    Yields:
        Path to temporary directory
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield temp_dir
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


@retry_with_backoff(max_attempts=2, base_delay=2)
async def run_ffmpeg_command(
    cmd: List[str],
    story_id: Optional[str] = None,
    timeout: int = 300
) -> None:
    """
    Run FFmpeg command with retry logic.

    Args:
        cmd: FFmpeg command as list of strings
        story_id: Story ID for logging
        timeout: Timeout in seconds (default: 300)

    Raises:
        CompositionError: If FFmpeg cannot be started
        RetryableError: If the command fails or times out (retried once)
    """
    logger.info(
        f"Running FFmpeg command: {' '.join(cmd)}",
        extra={"story_id": story_id, "command": cmd}
    )

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except (FileNotFoundError, PermissionError) as e:
        raise CompositionError(f"FFmpeg could not be started: {e}") from e

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise RetryableError(f"FFmpeg command timeout after {timeout}s")

    if process.returncode != 0:
        error_msg = stderr.decode(errors="replace")[-2000:] if stderr else "Unknown FFmpeg error"
        logger.error(
            f"FFmpeg command failed: {error_msg}",
            extra={"story_id": story_id, "error": error_msg, "command": cmd}
        )
        # System load and disk I/O failures are transient
        raise RetryableError(f"FFmpeg command failed (exit {process.returncode}): {error_msg}")


async def get_media_duration(media_path: Path) -> Optional[float]:
    """
    Get container duration using ffprobe.

    Args:
        media_path: Path to a video or audio file

    Returns:
        Duration in seconds, or None if it cannot be determined
    """
    try:
        process = await asyncio.create_subprocess_exec(
            "ffprobe",
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(media_path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=10)
        if process.returncode != 0:
            return None
        return float(stdout.decode().strip())
    except (FileNotFoundError, ValueError, asyncio.TimeoutError) as e:
        logger.warning(
            f"Failed to get media duration: {e}",
            extra={"media_path": str(media_path)}
        )
        return None


def safe_name(name: str, default: str) -> str:
    """Filesystem-safe output stem; anything outside [A-Za-z0-9_.-] becomes '_'."""
    cleaned = "".join(c if c.isalnum() or c in "_.-" else "_" for c in (name or "")).strip("._")
    return cleaned or default
