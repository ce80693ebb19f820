"""
Import job models.

An ImportJob is created on submission and mutated only by its background
task. Once it reaches `done` or `failed` it never changes again.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any

from .document import ImportResult


class JobStatus(str, Enum):
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


@dataclass
class JobProgress:
    """Progress snapshot reported after each page."""
    stage: str = "starting"
    current: int = 0
    total: int = 0
    page: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"stage": self.stage, "current": self.current, "total": self.total}
        if self.page is not None:
            data["page"] = self.page
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobProgress":
        return cls(
            stage=data.get("stage", "starting"),
            current=int(data.get("current", 0)),
            total=int(data.get("total", 0)),
            page=data.get("page"),
        )


def new_job_id() -> str:
    """Epoch milliseconds plus a short random suffix, e.g. 1760650000000-a3f9c1."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


@dataclass
class ImportJob:
    """Background import of one PDF into one center."""

    owner_id: str
    target_center_id: str
    id: str = field(default_factory=new_job_id)
    status: JobStatus = JobStatus.PROCESSING
    progress: JobProgress = field(default_factory=JobProgress)
    result: Optional[ImportResult] = None
    error: Optional[str] = None
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_status_dict(self) -> dict[str, Any]:
        """Poll response: result data is only exposed once the job is done."""
        return {
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "error": self.error,
            "data": self.result.to_dict() if self.status is JobStatus.DONE and self.result else None,
        }
