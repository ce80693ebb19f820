"""
Document preprocessor.

Decides how a PDF is read:
- Text-native PDFs are read straight from their text layer with PyMuPDF.
- Scanned PDFs are rendered to page images with poppler (pdf2image) for OCR.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional

import fitz  # PyMuPDF
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)

from .base import BaseProcessor, ProcessingContext
from .field_extractor import FieldExtractor, script_char_count
from ..exceptions import PDFExtractionError, ToolMissingError
from ..models import ImportResult, METHOD_TEXT

REQUIRED_TOOLS = ("tesseract", "pdftoppm")


class DocumentPreprocessor(BaseProcessor):
    """
    Choose between text-layer extraction and page rendering.
    """

    name = "DocumentPreprocessor"

    def __init__(self, context: ProcessingContext, extractor: Optional[FieldExtractor] = None):
        super().__init__(context)
        self.extractor = extractor or FieldExtractor(self.config.merge)

    def extract_text_layer(self, pdf_path: Path) -> Optional[tuple[str, int]]:
        """
        Read the embedded text of every page.

        Returns:
            (text, page_count), or None when the PDF cannot be read
        """
        try:
            doc = fitz.open(pdf_path)
        except Exception as e:
            self.log_warning(f"Text layer unavailable, falling back to OCR: {e}")
            return None

        try:
            pages = [doc.load_page(i).get_text("text") or "" for i in range(doc.page_count)]
            return "\n".join(pages), doc.page_count
        except Exception as e:
            self.log_warning(f"Text layer extraction failed, falling back to OCR: {e}")
            return None
        finally:
            doc.close()

    def try_text_layer(self, pdf_path: Path) -> Optional[ImportResult]:
        """
        Import a text-native PDF without OCR.

        The text layer is used only if it holds more than
        `min_script_chars` Bengali characters and yields at least one record.
        """
        if not self.config.text_layer.enabled:
            return None

        extracted = self.extract_text_layer(pdf_path)
        if extracted is None:
            return None
        text, page_count = extracted

        script_chars = script_char_count(text)
        if script_chars <= self.config.text_layer.min_script_chars:
            self.log_info("No usable text layer", script_chars=script_chars)
            return None

        parsed = self.extractor.parse(text)
        if not parsed.voters:
            self.log_info("Text layer yielded no records", script_chars=script_chars)
            return None

        self.log_info(f"Using text layer: {len(parsed.voters)} records", pages=page_count)
        return ImportResult(voters=parsed.voters, total_pages=page_count, method=METHOD_TEXT)

    def check_tools(self) -> None:
        """Fail fast when the OCR toolchain is not installed."""
        missing = [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]
        if self.config.ocr.tesseract_path and Path(self.config.ocr.tesseract_path).exists():
            missing = [tool for tool in missing if tool != "tesseract"]
        if missing:
            raise ToolMissingError(missing)

    def render_pages(self, pdf_path: Path, out_dir: Optional[Path] = None) -> List[Path]:
        """
        Render every page to PNG at the configured DPI.

        When the document has more than two pages the first one is dropped
        as a cover page.

        Returns:
            Page image paths in page order
        """
        out_dir = Path(out_dir or self.context.pages_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        render = self.config.render

        try:
            paths = convert_from_path(
                str(pdf_path),
                dpi=render.dpi,
                fmt="png",
                output_folder=str(out_dir),
                output_file="page",
                paths_only=True,
                timeout=render.timeout_sec,
            )
        except PDFInfoNotInstalledError:
            raise ToolMissingError(["pdftoppm"])
        except PDFPopplerTimeoutError as e:
            raise PDFExtractionError(f"Rendering timed out after {render.timeout_sec}s: {e}", str(pdf_path))
        except (PDFPageCountError, PDFSyntaxError) as e:
            raise PDFExtractionError(f"Failed to open PDF: {e}", str(pdf_path))

        pages = sorted(Path(p) for p in paths)
        if not pages:
            raise PDFExtractionError("No pages could be rendered from the PDF", str(pdf_path))

        self.context.total_pages = len(pages)
        if len(pages) >= render.cover_skip_min_pages:
            self.log_debug(f"Skipping cover page {pages[0].name}")
            pages = pages[1:]

        self.log_info(f"Rendered {self.context.total_pages} pages", dpi=render.dpi, to_ocr=len(pages))
        return pages
