import pytest

from rollimport.exceptions import ConflictError, NotFoundError, ValidationError
from rollimport.jobs import InMemoryJobStore, JobTracker
from rollimport.persistence import InMemoryCenterDirectory, InMemoryVoterRepository
from rollimport.services import ImportService, create_job_store, to_storage_doc

from conftest import FakePipeline, record_text

PDF_BYTES = b"%PDF-1.7\n%fake roll\n"


class FlakyRepository(InMemoryVoterRepository):
    """Fails the n-th insert_batch call (1-based)."""

    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = fail_on
        self.calls = 0

    def insert_batch(self, center_id, owner_id, docs):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("duplicate key value violates unique constraint")
        return super().insert_batch(center_id, owner_id, docs)


def make_service(config, pipeline=None, repository=None):
    repository = repository or InMemoryVoterRepository()
    centers = InMemoryCenterDirectory(repository)
    centers.add_center("c1", "u1", "Sonapur Primary School")
    tracker = JobTracker(InMemoryJobStore(), pipeline or FakePipeline(), config)
    return ImportService(tracker, centers, repository, config=config), tracker


def work_dirs(config):
    if not config.work_dir.exists():
        return []
    return [p for p in config.work_dir.iterdir() if p.name.startswith("ocr_")]


def test_submit_and_poll(config):
    service, tracker = make_service(config)

    job_id = service.submit_import("u1", "c1", PDF_BYTES, "roll.pdf")["jobId"]
    tracker.shutdown()

    status = service.get_status("u1", job_id)
    assert status["status"] == "done"
    assert status["error"] is None
    assert status["data"]["method"] == "ocr"
    assert status["data"]["voters"][0]["serialNo"] == 1
    assert work_dirs(config) == []


@pytest.mark.parametrize(
    "center_id, document, field_name",
    [
        ("c1", b"", "file"),
        ("", PDF_BYTES, "centerId"),
        ("c1", b"PK\x03\x04 not a pdf", "file"),
    ],
)
def test_submit_validation(config, center_id, document, field_name):
    service, tracker = make_service(config)
    with pytest.raises(ValidationError) as excinfo:
        service.submit_import("u1", center_id, document)
    assert excinfo.value.details["field_name"] == field_name
    tracker.shutdown()


def test_submit_rejects_oversized_upload(config):
    config.upload.max_bytes = 16
    service, tracker = make_service(config)
    with pytest.raises(ValidationError):
        service.submit_import("u1", "c1", PDF_BYTES + b"0" * 32)
    tracker.shutdown()


def test_submit_to_foreign_center(config):
    service, tracker = make_service(config)
    with pytest.raises(NotFoundError):
        service.submit_import("u2", "c1", PDF_BYTES)
    with pytest.raises(NotFoundError):
        service.submit_import("u1", "missing", PDF_BYTES)
    tracker.shutdown()


def test_conflict_returns_existing_job_and_cleans_up(config):
    pipeline = FakePipeline(block=True)
    service, tracker = make_service(config, pipeline)

    first = service.submit_import("u1", "c1", PDF_BYTES)["jobId"]
    with pytest.raises(ConflictError) as excinfo:
        service.submit_import("u1", "c1", PDF_BYTES)

    assert excinfo.value.job_id == first
    assert len(work_dirs(config)) == 1

    pipeline.release.set()
    tracker.shutdown()
    assert work_dirs(config) == []


def test_status_of_foreign_job_is_not_found(config):
    service, tracker = make_service(config)
    job_id = service.submit_import("u1", "c1", PDF_BYTES)["jobId"]

    with pytest.raises(NotFoundError):
        service.get_status("u2", job_id)
    with pytest.raises(NotFoundError):
        service.get_status("u1", "0-000000")
    tracker.shutdown()


def test_manual_import(config):
    service, tracker = make_service(config)
    text = record_text(1, "রহিম", father="করিম") + record_text(2, "করিম")

    result = service.import_manual("u1", "c1", text)

    assert result["totalExtracted"] == 2
    assert result["voters"][0]["fatherName"] == "করিম"
    assert result["voters"][1]["gender"] == "unknown"

    with pytest.raises(ValidationError):
        service.import_manual("u1", "c1", "")
    with pytest.raises(NotFoundError):
        service.import_manual("u2", "c1", text)
    tracker.shutdown()


def test_persist_in_batches(config):
    service, tracker = make_service(config)
    records = [{"serialNo": i, "cr": str(i), "name": "রহিম"} for i in range(1, 6)]

    summary = service.persist_records("u1", "c1", records)

    assert summary == {"inserted": 5, "total": 5, "errors": None}
    assert service.centers.centers["c1"].voter_count == 5
    tracker.shutdown()


def test_persist_tolerates_failed_batch(config):
    repository = FlakyRepository(fail_on=2)
    service, tracker = make_service(config, repository=repository)
    records = [{"serialNo": i, "name": "রহিম"} for i in range(1, 6)]

    summary = service.persist_records("u1", "c1", records)

    # batches of 2: [1, 2] ok, [3, 4] fails, [5] ok
    assert summary["inserted"] == 3
    assert summary["total"] == 5
    assert summary["errors"] == ["duplicate key value violates unique constraint"]
    assert [row["serial_no"] for row in repository.rows] == [1, 2, 5]
    assert service.centers.centers["c1"].voter_count == 3
    tracker.shutdown()


def test_persist_requires_records(config):
    service, tracker = make_service(config)
    with pytest.raises(ValidationError):
        service.persist_records("u1", "c1", [])
    tracker.shutdown()


def test_storage_defaults():
    doc = to_storage_doc({"fatherName": "করিম", "gender": "female"}, 4)
    assert doc["name"] == "অজানা"
    assert doc["serial_no"] == 5
    assert doc["father_name"] == "করিম"
    assert doc["gender"] == "female"
    assert to_storage_doc({"name": "রহিম"}, 0)["gender"] == ""


def test_job_store_selection(config, tmp_path):
    assert isinstance(create_job_store(config), InMemoryJobStore)

    config.jobs.store = "json"
    config.jobs.store_dir = str(tmp_path / "jobs")
    store = create_job_store(config)
    assert type(store).__name__ == "JSONJobStore"
    assert (tmp_path / "jobs").is_dir()
