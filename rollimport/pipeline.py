"""
Voter roll import pipeline.

Preprocessor -> (per page: recognition -> normalize -> segment -> extract
-> clean -> per-page merge) -> global dedup.

Pages are processed strictly one after another, and the two recognition
strategies of a page run one after the other as well.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Optional

from .config import Config, get_config
from .logger import get_logger, log_timing
from .models import Gender, ImportResult, JobProgress, METHOD_OCR, PageResult, VoterRecord
from .processors import (
    DocumentPreprocessor,
    DualStrategyRecognizer,
    FieldExtractor,
    ProcessingContext,
    TesseractRecognizer,
    deduplicate,
    merge_strategies,
)
from .utils.cancellation import CancellationToken

logger = get_logger(__name__)

ProgressCallback = Callable[[JobProgress], None]


class VoterImportPipeline:
    """
    Extract voter records from one PDF.

    The recognizer and extractor are injectable so tests can run the whole
    flow without Tesseract installed.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        recognizer: Optional[TesseractRecognizer] = None,
        extractor: Optional[FieldExtractor] = None,
    ):
        self.config = config or get_config()
        self.recognizer = recognizer
        self.extractor = extractor or FieldExtractor(self.config.merge)

    def parse_text(self, text: str) -> List[VoterRecord]:
        """Manual import: extract records from already-recognized text."""
        return self.extractor.parse(text).voters

    def run(
        self,
        pdf_path: Path,
        work_dir: Path,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImportResult:
        """
        Import one PDF.

        Args:
            pdf_path: PDF to import
            work_dir: Directory owned by this import for rendered pages and strips
            on_progress: Called after every processed page
            cancel_token: Checked before each page

        Returns:
            Deduplicated records sorted by serial number
        """
        started = time.perf_counter()
        context = ProcessingContext(config=self.config)
        context.setup_paths(pdf_path, work_dir)

        preprocessor = DocumentPreprocessor(context, self.extractor)
        text_result = preprocessor.try_text_layer(context.pdf_path)
        if text_result is not None:
            if on_progress:
                on_progress(JobProgress(stage="text", current=1, total=1, page="1"))
            return text_result

        preprocessor.check_tools()
        pages = preprocessor.render_pages(context.pdf_path)
        engine = DualStrategyRecognizer(context, self.recognizer)

        page_voters: List[VoterRecord] = []
        gender = Gender.UNKNOWN

        for index, page_path in enumerate(pages, start=1):
            if cancel_token:
                cancel_token.raise_if_cancelled(index - 1, len(pages))

            page_started = time.perf_counter()
            context.current_page = page_path.name

            texts = engine.recognize_page(page_path)
            full = self.extractor.parse(texts.full_page, gender)
            columns = self.extractor.parse(texts.columns, gender)
            if full.gender is not Gender.UNKNOWN:
                gender = full.gender
            if columns.gender is not Gender.UNKNOWN:
                gender = columns.gender

            merged = merge_strategies(full.voters, columns.voters, self.config.merge)
            page_voters.extend(merged)

            context.pages_processed = index
            context.page_results.append(PageResult(
                page_number=index,
                page_name=page_path.name,
                strategy_a_count=len(full.voters),
                strategy_b_count=len(columns.voters),
                merged_count=len(merged),
                processing_time_sec=time.perf_counter() - page_started,
            ))
            logger.info(
                f"[OCR] {page_path.name}: full={len(full.voters)} "
                f"columns={len(columns.voters)} -> {len(merged)}"
            )

            if on_progress:
                on_progress(JobProgress(stage="ocr", current=index, total=len(pages), page=page_path.name))

        voters = deduplicate(page_voters)
        log_timing(logger, f"Imported {len(voters)} voters from {len(pages)} pages", time.perf_counter() - started)

        return ImportResult(
            voters=voters,
            total_pages=context.total_pages,
            method=METHOD_OCR,
            pages=context.page_results,
        )
