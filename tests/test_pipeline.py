import shutil

import pytesseract
import pytest

from rollimport.config import Config, OCRConfig
from rollimport.exceptions import ProcessingAbortedError, ToolMissingError
from rollimport.models import Gender, METHOD_OCR, METHOD_TEXT
from rollimport.pipeline import VoterImportPipeline
from rollimport.processors import (
    DocumentPreprocessor,
    DualStrategyRecognizer,
    ProcessingContext,
    TesseractRecognizer,
)
from rollimport.processors import pdf_extractor
from rollimport.utils import CancellationToken

from conftest import FIVE_RECORDS, ScriptedRecognizer, record_text


@pytest.fixture
def scanned(monkeypatch, page_images):
    """Make the preprocessor treat any PDF as a scanned document of page_images."""

    def render_pages(self, pdf_path, out_dir=None):
        self.context.total_pages = len(page_images)
        return page_images[1:]

    monkeypatch.setattr(DocumentPreprocessor, "try_text_layer", lambda self, pdf_path: None)
    monkeypatch.setattr(DocumentPreprocessor, "check_tools", lambda self: None)
    monkeypatch.setattr(DocumentPreprocessor, "render_pages", render_pages)
    return page_images


def test_column_strategy_alone_yields_records(config, scanned, tmp_path):
    recognizer = ScriptedRecognizer({("page-2_col0", 6): FIVE_RECORDS})
    result = VoterImportPipeline(config, recognizer=recognizer).run(tmp_path / "roll.pdf", tmp_path / "job")

    assert result.method == METHOD_OCR
    assert result.total_extracted == 5
    assert result.pages[0].strategy_a_count == 0
    assert result.pages[0].strategy_b_count == 5
    assert result.pages[0].merged_count == 5


def test_both_strategies_are_merged(config, scanned, tmp_path):
    recognizer = ScriptedRecognizer({
        ("page-2", 1): record_text(1, "রহিম") + record_text(2, "করিম", father="সালাম"),
        ("page-2_col1", 6): record_text(1, "রহিম", father="করিম", voter_no="1234567890"),
    })
    result = VoterImportPipeline(config, recognizer=recognizer).run(tmp_path / "roll.pdf", tmp_path / "job")

    first, second = result.voters
    assert first.father_name == "করিম"
    assert first.voter_no == "1234567890"
    assert second.father_name == "সালাম"


def test_pages_run_in_order_and_report_progress(config, scanned, tmp_path):
    recognizer = ScriptedRecognizer({
        ("page-2", 1): record_text(1, "রহিম"),
        ("page-3", 1): record_text(2, "করিম"),
    })
    updates = []
    result = VoterImportPipeline(config, recognizer=recognizer).run(
        tmp_path / "roll.pdf", tmp_path / "job", on_progress=updates.append
    )

    assert [v.cr for v in result.voters] == ["1", "2"]
    assert result.total_pages == 3
    assert [(u.stage, u.current, u.total, u.page) for u in updates] == [
        ("ocr", 1, 2, "page-2.png"),
        ("ocr", 2, 2, "page-3.png"),
    ]
    pages_seen = [stem for stem, _ in recognizer.calls if "_col" not in stem]
    assert pages_seen == ["page-2", "page-3"]


def test_gender_carries_to_later_pages(config, scanned, tmp_path):
    recognizer = ScriptedRecognizer({
        ("page-2", 1): "পুরুষ\n" + record_text(1, "রহিম"),
        ("page-3", 1): record_text(2, "করিম"),
    })
    result = VoterImportPipeline(config, recognizer=recognizer).run(tmp_path / "roll.pdf", tmp_path / "job")

    assert [v.gender for v in result.voters] == [Gender.MALE, Gender.MALE]


def test_duplicates_across_pages_are_folded(config, scanned, tmp_path):
    recognizer = ScriptedRecognizer({
        ("page-2", 1): record_text(7, "রহিম", father="করিম"),
        ("page-3", 1): record_text("07", "রহিম", mother="রহিমা"),
    })
    [voter] = VoterImportPipeline(config, recognizer=recognizer).run(tmp_path / "roll.pdf", tmp_path / "job").voters

    assert voter.serial_no == 7
    assert voter.father_name == "করিম"
    assert voter.mother_name == "রহিমা"


def test_cancel_stops_between_pages(config, scanned, tmp_path):
    token = CancellationToken()
    recognizer = ScriptedRecognizer({("page-2", 1): record_text(1, "রহিম")})

    def cancel_after_first(progress):
        token.cancel()

    with pytest.raises(ProcessingAbortedError):
        VoterImportPipeline(config, recognizer=recognizer).run(
            tmp_path / "roll.pdf", tmp_path / "job", on_progress=cancel_after_first, cancel_token=token
        )
    assert token.is_cancelled
    assert all(not stem.startswith("page-3") for stem, _ in recognizer.calls)


def test_column_split_writes_three_strips(config, page_images, tmp_path):
    context = ProcessingContext(config=config)
    context.setup_paths(tmp_path / "roll.pdf", tmp_path / "job")
    recognizer = ScriptedRecognizer({("page-1_col0", 6): "a", ("page-1_col2", 6): "c"})

    text = DualStrategyRecognizer(context, recognizer).column_split(page_images[0])

    assert text == "a\n\nc\n"
    assert sorted(p.name for p in context.strips_dir.iterdir()) == [
        "page-1_col0.png",
        "page-1_col1.png",
        "page-1_col2.png",
    ]


def test_recognizer_errors_yield_empty_text(monkeypatch, tmp_path):
    def failing(*args, **kwargs):
        raise pytesseract.TesseractError(1, "bad image")

    monkeypatch.setattr(pytesseract, "image_to_string", failing)
    assert TesseractRecognizer(OCRConfig(tesseract_path="")).recognize(tmp_path / "x.png", 6) == ""


def test_recognizer_timeout_yields_empty_text(monkeypatch, tmp_path):
    def timeout(*args, **kwargs):
        raise RuntimeError("Tesseract process timeout")

    monkeypatch.setattr(pytesseract, "image_to_string", timeout)
    assert TesseractRecognizer(OCRConfig(tesseract_path="")).recognize(tmp_path / "x.png", 1) == ""


def test_text_layer_is_used_when_dense(config, monkeypatch, tmp_path):
    text = "".join(record_text(i, "রহিম উদ্দিন", father="করিম উদ্দিন") for i in range(1, 6))
    monkeypatch.setattr(DocumentPreprocessor, "extract_text_layer", lambda self, pdf_path: (text, 2))

    def no_render(self, pdf_path, out_dir=None):
        raise AssertionError("rendering must be skipped")

    monkeypatch.setattr(DocumentPreprocessor, "render_pages", no_render)
    updates = []
    result = VoterImportPipeline(config).run(tmp_path / "roll.pdf", tmp_path / "job", on_progress=updates.append)

    assert result.method == METHOD_TEXT
    assert result.total_pages == 2
    assert result.total_extracted == 5
    assert updates[0].stage == "text"


def test_sparse_text_layer_falls_back(config, monkeypatch, tmp_path):
    context = ProcessingContext(config=config)
    monkeypatch.setattr(DocumentPreprocessor, "extract_text_layer", lambda self, pdf_path: (record_text(1, "রহিম"), 1))
    assert DocumentPreprocessor(context).try_text_layer(tmp_path / "roll.pdf") is None


def test_cover_page_skipped_only_for_long_documents(config, monkeypatch, tmp_path):
    context = ProcessingContext(config=config)
    context.setup_paths(tmp_path / "roll.pdf", tmp_path / "job")
    preprocessor = DocumentPreprocessor(context)

    rendered = [tmp_path / f"page-{i}.png" for i in range(1, 4)]
    monkeypatch.setattr(pdf_extractor, "convert_from_path", lambda *a, **kw: [str(p) for p in rendered])
    assert preprocessor.render_pages(tmp_path / "roll.pdf") == rendered[1:]
    assert context.total_pages == 3

    monkeypatch.setattr(pdf_extractor, "convert_from_path", lambda *a, **kw: [str(p) for p in rendered[:2]])
    assert preprocessor.render_pages(tmp_path / "roll.pdf") == rendered[:2]
    assert context.total_pages == 2


def test_missing_tools_are_named(monkeypatch, tmp_path):
    config = Config(base_dir=tmp_path, ocr=OCRConfig(tesseract_path=""))
    monkeypatch.setattr(shutil, "which", lambda tool: None)

    with pytest.raises(ToolMissingError) as excinfo:
        DocumentPreprocessor(ProcessingContext(config=config)).check_tools()

    assert excinfo.value.missing_tools == ["tesseract", "pdftoppm"]
    assert "tesseract-ocr-ben" in str(excinfo.value)


def test_parse_text_manual_path(config):
    voters = VoterImportPipeline(config).parse_text("১. নাম: রহিম\n২. নাম: করিম\n")
    assert [v.serial_no for v in voters] == [1, 2]


def test_last_strip_absorbs_remainder():
    import numpy as np
    from rollimport.utils import split_vertical_strips

    strips = split_vertical_strips(np.zeros((10, 302, 3), dtype=np.uint8), 3)
    assert [s.shape[1] for s in strips] == [100, 100, 102]
