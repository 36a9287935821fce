"""
Progress reporting.

Coarse stage/percentage updates pushed to an optional observer. Reporting is
purely observational and never gates the pipeline.
"""

import inspect
from typing import Awaitable, Callable, Optional, Union

from shared.logging import get_logger
from shared.models.video import VideoGenerationProgress

logger = get_logger("progress")

ProgressCallback = Callable[[VideoGenerationProgress], Union[None, Awaitable[None]]]


class ProgressReporter:
    """Fire-and-forget observer sink; a missing callback is a no-op."""

    def __init__(self, callback: Optional[ProgressCallback] = None, total_steps: int = 4):
        self.callback = callback
        self.total_steps = total_steps

    async def report(self, stage: str, percent: int, detail: Optional[str] = None) -> None:
        if self.callback is None:
            return
        update = VideoGenerationProgress(
            current_step=stage,
            progress=max(0, min(100, int(percent))),
            total_steps=self.total_steps,
            current_segment=detail
        )
        try:
            result = self.callback(update)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(
                f"Progress observer failed: {e}",
                extra={"stage": stage, "progress": percent, "error": str(e)}
            )
