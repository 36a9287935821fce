"""
Job client module.

Create / poll / fetch wrapper shared by every asynchronous generation provider.
"""

from modules.job_client.base import JobProvider
from modules.job_client.client import JobClient

__all__ = ["JobClient", "JobProvider"]
