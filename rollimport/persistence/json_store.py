"""
JSON file-based job store.

Keeps one JSON file per job under a directory so job state survives a
process restart:
- <base_dir>/<job_id>.json

A job that was still processing when the process stopped can never
finish, so it is marked failed when the store is opened again.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from ..jobs.store import JobStore, apply_changes
from ..logger import get_logger
from ..models import ImportJob, ImportResult, JobProgress, JobStatus

logger = get_logger(__name__)

INTERRUPTED_MESSAGE = "Import interrupted by restart"


def job_to_dict(job: ImportJob) -> dict[str, Any]:
    return {
        "id": job.id,
        "ownerId": job.owner_id,
        "targetCenterId": job.target_center_id,
        "status": job.status.value,
        "progress": job.progress.to_dict(),
        "result": job.result.to_dict() if job.result else None,
        "error": job.error,
        "startedAt": job.started_at,
        "finishedAt": job.finished_at,
    }


def job_from_dict(data: dict[str, Any]) -> ImportJob:
    return ImportJob(
        id=data["id"],
        owner_id=data["ownerId"],
        target_center_id=data["targetCenterId"],
        status=JobStatus(data.get("status", JobStatus.PROCESSING.value)),
        progress=JobProgress.from_dict(data.get("progress") or {}),
        result=ImportResult.from_dict(data["result"]) if data.get("result") else None,
        error=data.get("error"),
        started_at=data.get("startedAt", 0.0),
        finished_at=data.get("finishedAt"),
    )


class JSONJobStore(JobStore):
    """
    Job store persisted as JSON files.

    All jobs are also held in memory; files are rewritten on every change.
    """

    def __init__(self, base_dir: Path):
        """
        Initialize the store and recover jobs from disk.

        Args:
            base_dir: Directory holding one file per job
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._jobs: Dict[str, ImportJob] = {}
        self._lock = threading.RLock()
        self._load()

    def _path(self, job_id: str) -> Path:
        return self.base_dir / f"{job_id}.json"

    def _load(self) -> None:
        interrupted = 0
        for path in sorted(self.base_dir.glob("*.json")):
            try:
                job = job_from_dict(json.loads(path.read_text(encoding="utf-8")))
            except (OSError, ValueError, KeyError) as e:
                logger.warning(f"Skipping unreadable job file {path.name}: {e}")
                continue

            if job.status is JobStatus.PROCESSING:
                job.status = JobStatus.FAILED
                job.error = INTERRUPTED_MESSAGE
                self._save(job)
                interrupted += 1
            self._jobs[job.id] = job

        if self._jobs:
            logger.info(f"Loaded {len(self._jobs)} jobs from {self.base_dir} ({interrupted} interrupted)")

    def _save(self, job: ImportJob) -> Path:
        path = self._path(job.id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(job_to_dict(job), ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)
        return path

    def create(self, job: ImportJob) -> ImportJob:
        with self._lock:
            self._jobs[job.id] = job
            self._save(job)
        return job

    def get(self, job_id: str) -> Optional[ImportJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def update(self, job_id: str, **changes: Any) -> Optional[ImportJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if apply_changes(job, changes):
                self._save(job)
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
