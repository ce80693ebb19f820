"""
Import service.

The narrow interface outer layers (HTTP handlers, the CLI) call into:
- submit a PDF for background import and poll its status
- extract records from already-recognized text
- persist a reviewed record list into a center
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Any, List, Optional

from ..config import Config, get_config
from ..exceptions import NotFoundError, PartialInsertFailure, ValidationError
from ..jobs import InMemoryJobStore, JobStore, JobTracker
from ..logger import get_logger
from ..models import Gender, VoterRecord
from ..persistence import CenterDirectory, JSONJobStore, VoterRepository
from ..pipeline import VoterImportPipeline

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"
UNKNOWN_NAME = "অজানা"  # "unknown"


def create_job_store(config: Optional[Config] = None) -> JobStore:
    """Build the job store selected by JOB_STORE ("memory" or "json")."""
    config = config or get_config()
    if config.jobs.store == "json":
        store_dir = Path(config.jobs.store_dir or config.base_dir / "jobs")
        return JSONJobStore(store_dir)
    return InMemoryJobStore()


def to_storage_doc(record: dict[str, Any], index: int) -> dict[str, Any]:
    """
    Map a wire-shape record to a storage row.

    A missing name becomes UNKNOWN_NAME and a missing serial number the
    record's 1-based position in the submitted list.
    """
    voter = VoterRecord.from_dict(record)
    gender = Gender.parse(voter.gender)
    return {
        "serial_no": voter.serial_no or index + 1,
        "cr": voter.cr,
        "voter_no": voter.voter_no,
        "nid": voter.nid,
        "name": voter.name or UNKNOWN_NAME,
        "father_name": voter.father_name,
        "mother_name": voter.mother_name,
        "husband_name": voter.husband_name,
        "gender": "" if gender is Gender.UNKNOWN else gender.value,
        "occupation": voter.occupation,
        "date_of_birth": voter.date_of_birth,
        "address": voter.address,
        "area": voter.area,
    }


class ImportService:
    """Entry points for importing voter rolls into a center."""

    def __init__(
        self,
        tracker: JobTracker,
        centers: CenterDirectory,
        repository: VoterRepository,
        pipeline: Optional[VoterImportPipeline] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or get_config()
        self.tracker = tracker
        self.centers = centers
        self.repository = repository
        self.pipeline = pipeline or tracker.pipeline

    def _require_center(self, owner_id: str, center_id: str) -> None:
        if not center_id:
            raise ValidationError("Select a center", field_name="centerId")
        if not self.centers.is_owned_by(center_id, owner_id):
            raise NotFoundError("Center not found", resource="center", resource_id=center_id)

    def submit_import(self, owner_id: str, center_id: str, document: bytes, filename: str = "") -> dict[str, str]:
        """
        Start a background import of one PDF.

        Returns:
            {"jobId": ...} as soon as the job exists

        Raises:
            ValidationError: No document, not a PDF, or too large
            NotFoundError: Center missing or not owned by the caller
            ConflictError: An import for this center is already processing
        """
        if not document:
            raise ValidationError("Upload a PDF file", field_name="file")
        if not center_id:
            raise ValidationError("Select a center", field_name="centerId")

        max_bytes = self.config.upload.max_bytes
        if len(document) > max_bytes:
            raise ValidationError(
                f"File exceeds the {max_bytes // (1024 * 1024)}MB limit",
                field_name="file",
                field_value=len(document),
            )
        if not document.startswith(PDF_MAGIC):
            raise ValidationError("Only PDF files are accepted", field_name="file", field_value=filename or None)

        self._require_center(owner_id, center_id)

        Path(self.config.work_dir).mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix="ocr_", dir=self.config.work_dir))
        try:
            pdf_path = work_dir / "upload.pdf"
            pdf_path.write_bytes(document)
            handle = self.tracker.submit(owner_id, center_id, pdf_path, work_dir)
        except Exception:
            shutil.rmtree(work_dir, ignore_errors=True)
            raise

        logger.info(f"Accepted {filename or 'upload'} ({len(document)} bytes) as job {handle.job_id}")
        return {"jobId": handle.job_id}

    def get_status(self, owner_id: str, job_id: str) -> dict[str, Any]:
        """Poll a job. Jobs of other owners are reported as not found."""
        job = self.tracker.get(job_id)
        if job is None or job.owner_id != owner_id:
            raise NotFoundError("Import status not found", resource="job", resource_id=job_id)
        return job.to_status_dict()

    def import_manual(self, owner_id: str, center_id: str, text: str) -> dict[str, Any]:
        """Extract records from pasted text, synchronously."""
        if not center_id or not text:
            raise ValidationError("Center and text are required", field_name="text" if center_id else "centerId")
        self._require_center(owner_id, center_id)

        voters = self.pipeline.parse_text(text)
        logger.info(f"Manual import extracted {len(voters)} voters for center {center_id}")
        return {"voters": [v.to_dict() for v in voters], "totalExtracted": len(voters)}

    def persist_records(self, owner_id: str, center_id: str, records: List[dict[str, Any]]) -> dict[str, Any]:
        """
        Insert reviewed records in fixed-size batches.

        A failed batch does not stop later batches; its error message is
        reported alongside the count of rows that did get inserted.

        Returns:
            {"inserted": n, "total": m, "errors": [...] or None}
        """
        self._require_center(owner_id, center_id)
        if not records:
            raise ValidationError("Voter list is empty", field_name="voters")

        docs = [to_storage_doc(record, i) for i, record in enumerate(records)]
        batch_size = max(1, self.config.persist.batch_size)
        inserted = 0
        errors: List[str] = []

        for start in range(0, len(docs), batch_size):
            batch = docs[start:start + batch_size]
            try:
                inserted += self.repository.insert_batch(center_id, owner_id, batch)
            except Exception as e:
                logger.warning(f"Batch {start // batch_size + 1} failed: {e}")
                errors.append(str(e))

        self.centers.refresh_voter_count(center_id)

        if errors:
            failure = PartialInsertFailure(errors, inserted=inserted, total=len(docs))
            logger.warning(failure.message)
            return failure.to_dict()

        logger.info(f"Saved {inserted} voters to center {center_id}")
        return {"inserted": inserted, "total": len(docs), "errors": None}
