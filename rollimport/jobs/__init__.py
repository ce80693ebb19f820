"""
Background import jobs.
"""

from .store import InMemoryJobStore, JobStore
from .tracker import JobHandle, JobTracker
from ..utils.cancellation import CancellationToken

__all__ = [
    "CancellationToken",
    "InMemoryJobStore",
    "JobHandle",
    "JobStore",
    "JobTracker",
]
