import os
import threading
from pathlib import Path

os.environ.setdefault("LOG_TO_FILE", "0")

import cv2
import numpy as np
import pytest

from rollimport.config import Config, PersistConfig
from rollimport.models import ImportResult, METHOD_OCR, VoterRecord


def record_text(serial, name, father="", voter_no="", mother="", address=""):
    lines = [f"{serial}. নাম: {name}"]
    if voter_no:
        lines.append(f"ভোটার নং: {voter_no}")
    if father:
        lines.append(f"পিতা: {father}")
    if mother:
        lines.append(f"মাতা: {mother}")
    if address:
        lines.append(f"ঠিকানা: {address}")
    return "\n".join(lines) + "\n"


FIVE_RECORDS = "".join(
    record_text(i, name, father=father)
    for i, (name, father) in enumerate(
        [
            ("রহিম", "করিম"),
            ("করিম", "সালাম"),
            ("জামাল", "কামাল"),
            ("সালমা", "হাসান"),
            ("নাসির", "বশির"),
        ],
        start=1,
    )
)


@pytest.fixture
def config(tmp_path):
    return Config(
        base_dir=tmp_path,
        logs_dir=tmp_path / "logs",
        work_dir=tmp_path / "work",
        debug=False,
        persist=PersistConfig(batch_size=2),
    )


@pytest.fixture
def page_images(tmp_path):
    """Three blank rendered pages."""
    pages_dir = tmp_path / "rendered"
    pages_dir.mkdir()
    paths = []
    for i in range(1, 4):
        path = pages_dir / f"page-{i}.png"
        cv2.imwrite(str(path), np.full((120, 300, 3), 255, dtype=np.uint8))
        paths.append(path)
    return paths


class ScriptedRecognizer:
    """Returns canned text per (page stem, psm); strips are keyed by '<stem>_col<i>'."""

    def __init__(self, texts=None):
        self.texts = texts or {}
        self.calls = []

    def recognize(self, image_path, psm):
        stem = Path(image_path).stem
        self.calls.append((stem, psm))
        return self.texts.get((stem, psm), "")


class FakePipeline:
    """Pipeline double for the job tracker; can block until released."""

    def __init__(self, voters=None, error=None, block=False):
        self.voters = voters if voters is not None else [VoterRecord(serial_no=1, cr="1", name="রহিম")]
        self.error = error
        self.release = threading.Event()
        self.started = threading.Event()
        if not block:
            self.release.set()

    def run(self, pdf_path, work_dir, on_progress=None, cancel_token=None):
        self.started.set()
        self.release.wait(timeout=5)
        if on_progress:
            from rollimport.models import JobProgress
            on_progress(JobProgress(stage="ocr", current=1, total=1, page="page-1.png"))
        if cancel_token:
            cancel_token.raise_if_cancelled(1, 1)
        if self.error:
            raise self.error
        return ImportResult(voters=list(self.voters), total_pages=1, method=METHOD_OCR)

    def parse_text(self, text):
        from rollimport.processors import FieldExtractor
        return FieldExtractor().parse(text).voters
