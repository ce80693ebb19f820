"""
Dual-strategy recognition engine.

Runs Tesseract twice per rendered page:
- Strategy A: the whole page with automatic layout detection (PSM 1)
- Strategy B: the page cut into vertical strips, one per table column,
  each read as a single uniform block (PSM 6)

Every Tesseract call is time-bounded. A failed or timed-out call returns
empty text so one bad page never aborts the import.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytesseract

from .base import BaseProcessor, ProcessingContext
from ..config import OCRConfig
from ..logger import get_logger
from ..utils.image_utils import load_image, save_image, split_vertical_strips

logger = get_logger(__name__)


class TesseractRecognizer:
    """Thin pytesseract wrapper that never raises on recognition failure."""

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or OCRConfig()
        if self.config.tesseract_path:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_path

    def recognize(self, image_path: Path, psm: int) -> str:
        """
        Recognize one image file.

        Returns:
            Recognized text, or "" on any Tesseract error or timeout
        """
        try:
            return pytesseract.image_to_string(
                str(image_path),
                lang=self.config.languages,
                config=f"--psm {psm}",
                timeout=self.config.timeout_sec,
            )
        except (pytesseract.TesseractError, OSError) as e:
            logger.warning(f"Tesseract failed on {Path(image_path).name}: {e}")
        except RuntimeError as e:
            # TesseractError is a RuntimeError too; a bare one means timeout
            logger.warning(f"Tesseract timed out on {Path(image_path).name}: {e}")
        return ""


@dataclass
class PageTexts:
    """Recognized text of one page from both strategies."""
    full_page: str = ""
    columns: str = ""


class DualStrategyRecognizer(BaseProcessor):
    """
    Recognize rendered pages with both OCR strategies, sequentially.
    """

    name = "DualStrategyRecognizer"

    def __init__(self, context: ProcessingContext, recognizer: Optional[TesseractRecognizer] = None):
        super().__init__(context)
        self.ocr_config = self.config.ocr
        self.recognizer = recognizer or TesseractRecognizer(self.ocr_config)

    def full_page(self, image_path: Path) -> str:
        """Strategy A: whole page, automatic layout detection."""
        return self.recognizer.recognize(image_path, self.ocr_config.full_page_psm)

    def column_split(self, image_path: Path) -> str:
        """
        Strategy B: recognize each vertical strip on its own.

        Strip outputs are concatenated left to right, each followed by a
        newline so a record never spans two strips.
        """
        image = load_image(image_path)
        if image is None:
            self.log_warning(f"Could not load page image {Path(image_path).name}")
            return ""

        out_dir = self.context.strips_dir or Path(image_path).parent
        stem = Path(image_path).stem
        parts = []
        for i, strip in enumerate(split_vertical_strips(image, self.ocr_config.column_count)):
            strip_path = out_dir / f"{stem}_col{i}.png"
            if not save_image(strip, strip_path):
                self.log_warning(f"Could not write strip {strip_path.name}")
                parts.append("")
                continue
            parts.append(self.recognizer.recognize(strip_path, self.ocr_config.column_psm))
        return "".join(f"{text}\n" for text in parts)

    def recognize_page(self, image_path: Path) -> PageTexts:
        """Run strategy A, then strategy B, on one page."""
        texts = PageTexts(full_page=self.full_page(image_path))
        texts.columns = self.column_split(image_path)
        self.log_debug(
            f"Recognized {Path(image_path).name}",
            full_chars=len(texts.full_page),
            column_chars=len(texts.columns),
        )
        return texts
