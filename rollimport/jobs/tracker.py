"""
Background import job tracker.

Submission creates the job and returns at once; the pipeline runs on a
worker thread and reports progress into the job store. Every outcome of
the background task, including unexpected errors, ends up in job state.
"""

from __future__ import annotations

import shutil
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .store import JobStore
from ..config import Config, get_config
from ..exceptions import ConflictError, ExtractionEmptyError, RollImportError
from ..logger import get_logger
from ..models import ImportJob, JobProgress, JobStatus
from ..pipeline import VoterImportPipeline
from ..utils.cancellation import CancellationToken

logger = get_logger(__name__)


@dataclass
class JobHandle:
    """What the caller gets back from a submission."""
    job_id: str
    future: Future
    token: CancellationToken

    def cancel(self) -> None:
        self.token.cancel()

    def done(self) -> bool:
        return self.future.done()


class JobTracker:
    """
    Run imports as background jobs.

    At most one job per (owner, center) pair may be processing at a time.
    """

    def __init__(
        self,
        store: JobStore,
        pipeline: Optional[VoterImportPipeline] = None,
        config: Optional[Config] = None,
        executor: Optional[Executor] = None,
    ):
        self.config = config or get_config()
        self.store = store
        self.pipeline = pipeline or VoterImportPipeline(self.config)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.jobs.max_workers,
            thread_name_prefix="rollimport-job",
        )
        self._submit_lock = threading.Lock()
        self._handles: Dict[str, JobHandle] = {}

    def submit(self, owner_id: str, center_id: str, document_path: Path, work_dir: Path) -> JobHandle:
        """
        Create a processing job and start it in the background.

        Raises:
            ConflictError: A job for the same owner and center is still processing
        """
        with self._submit_lock:
            active = self.store.find_active(owner_id, center_id)
            if active is not None:
                raise ConflictError("An import for this center is already in progress", active.id)
            job = self.store.create(ImportJob(owner_id=owner_id, target_center_id=center_id))

        logger.info(f"Job {job.id} submitted: owner={owner_id} center={center_id}")
        token = CancellationToken()
        future = self._executor.submit(self._run, job.id, Path(document_path), Path(work_dir), token)
        handle = JobHandle(job_id=job.id, future=future, token=token)
        self._handles[job.id] = handle
        # Runs at once if the job already finished
        future.add_done_callback(lambda _: self._handles.pop(job.id, None))
        return handle

    def _run(self, job_id: str, document_path: Path, work_dir: Path, token: CancellationToken) -> None:
        started = time.perf_counter()
        try:
            self.store.update(job_id, progress=JobProgress(stage="ocr"))
            result = self.pipeline.run(
                document_path,
                work_dir,
                on_progress=lambda progress: self.store.update(job_id, progress=progress),
                cancel_token=token,
            )
            if not result.voters:
                raise ExtractionEmptyError(pages=result.total_pages, method=result.method)

            self.store.update(job_id, status=JobStatus.DONE, result=result, finished_at=time.time())
            logger.info(
                f"Job {job_id} done: {result.total_extracted} voters, "
                f"{result.total_pages} pages, method={result.method} "
                f"({time.perf_counter() - started:.1f}s)"
            )
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or type(e).__name__
            logger.error(f"Job {job_id} failed: {message}", exc_info=not isinstance(e, RollImportError))
            try:
                self.store.update(job_id, status=JobStatus.FAILED, error=message, finished_at=time.time())
            except Exception as store_error:
                logger.error(f"Could not record failure of job {job_id}: {store_error}")
        finally:
            if self.config.keep_intermediate_files:
                logger.debug(f"Keeping work directory {work_dir}")
            else:
                shutil.rmtree(work_dir, ignore_errors=True)

    def get(self, job_id: str) -> Optional[ImportJob]:
        return self.store.get(job_id)

    def handle(self, job_id: str) -> Optional[JobHandle]:
        """Handle of a job that is still running, or None."""
        return self._handles.get(job_id)

    def cancel(self, job_id: str) -> bool:
        """
        Request cancellation; the job stops at its next page boundary and
        ends `failed`.

        In-process only: the import service does not expose it, so jobs
        submitted through the service still end only by completing or
        failing. Returns False for unknown or finished jobs.
        """
        handle = self._handles.get(job_id)
        if handle is None or handle.done():
            return False
        handle.cancel()
        return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
