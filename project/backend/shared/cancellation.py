"""
Cooperative cancellation for a generation run.
"""

from typing import Optional

from shared.errors import JobCancelled


class CancellationToken:
    """Flag shared between a caller and one run; checked at every poll interval."""

    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        self._cancelled = True
        self._reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self, job_id: Optional[str] = None) -> None:
        if self._cancelled:
            raise JobCancelled(job_id=job_id, reason=self._reason)
