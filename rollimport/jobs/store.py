"""
Job store abstraction.

The tracker reads and writes jobs only through a JobStore, so the
registry can be swapped for a test double or a durable backing.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..logger import get_logger
from ..models import ImportJob, JobStatus

logger = get_logger(__name__)


class JobStore(ABC):
    """
    Abstract registry of import jobs.

    Implementations must reject every change to a job that has reached a
    terminal state.
    """

    @abstractmethod
    def create(self, job: ImportJob) -> ImportJob:
        """Register a new job."""
        pass

    @abstractmethod
    def get(self, job_id: str) -> Optional[ImportJob]:
        """Return the job, or None if unknown."""
        pass

    @abstractmethod
    def update(self, job_id: str, **changes: Any) -> Optional[ImportJob]:
        """
        Apply attribute changes to a processing job.

        Returns:
            The job after the update, or None if unknown
        """
        pass

    @abstractmethod
    def find_active(self, owner_id: str, center_id: str) -> Optional[ImportJob]:
        """Return the processing job for (owner, center), if any."""
        pass


def apply_changes(job: ImportJob, changes: Dict[str, Any]) -> bool:
    """Set attributes on a job unless it is terminal. Returns True if applied."""
    if job.is_terminal:
        logger.debug(f"Ignoring update to finished job {job.id}: {sorted(changes)}")
        return False
    for key, value in changes.items():
        if not hasattr(job, key):
            raise AttributeError(f"ImportJob has no attribute '{key}'")
        if key == "status":
            value = JobStatus(value)
        setattr(job, key, value)
    return True


class InMemoryJobStore(JobStore):
    """Process-wide in-memory registry; jobs are lost on restart."""

    def __init__(self):
        self._jobs: Dict[str, ImportJob] = {}
        self._lock = threading.RLock()

    def create(self, job: ImportJob) -> ImportJob:
        with self._lock:
            self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> Optional[ImportJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def update(self, job_id: str, **changes: Any) -> Optional[ImportJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            apply_changes(job, changes)
            return job

    def find_active(self, owner_id: str, center_id: str) -> Optional[ImportJob]:
        with self._lock:
            for job in self._jobs.values():
                if (
                    job.status is JobStatus.PROCESSING
                    and job.owner_id == owner_id
                    and job.target_center_id == center_id
                ):
                    return job
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
