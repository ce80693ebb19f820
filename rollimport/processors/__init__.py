"""
Document processors module.

Contains all processing components for the voter roll import pipeline:
- DocumentPreprocessor: Text-layer extraction or page rendering
- DualStrategyRecognizer: Whole-page and column-split Tesseract passes
- FieldExtractor: Anchor segmentation and label-rule field extraction
- Field cleaner, cross-strategy merger and global deduplicator
"""

from .base import BaseProcessor, ProcessingContext
from .normalizer import normalize_digits, normalize_text, prepare_for_segmentation
from .segmenter import Anchor, canonical_serial, detect_gender, find_anchors, split_chunks
from .field_rules import FIELD_RULES, LabelRule
from .field_cleaner import clean_field, post_clean, truncate_doubled_address
from .field_extractor import FieldExtractor, ParseResult, script_char_count
from .merger import deduplicate, merge_strategies, score_field
from .ocr_engine import DualStrategyRecognizer, PageTexts, TesseractRecognizer
from .pdf_extractor import DocumentPreprocessor

__all__ = [
    "BaseProcessor",
    "ProcessingContext",
    "normalize_digits",
    "normalize_text",
    "prepare_for_segmentation",
    "Anchor",
    "canonical_serial",
    "detect_gender",
    "find_anchors",
    "split_chunks",
    "FIELD_RULES",
    "LabelRule",
    "clean_field",
    "post_clean",
    "truncate_doubled_address",
    "FieldExtractor",
    "ParseResult",
    "script_char_count",
    "deduplicate",
    "merge_strategies",
    "score_field",
    "DualStrategyRecognizer",
    "PageTexts",
    "TesseractRecognizer",
    "DocumentPreprocessor",
]
