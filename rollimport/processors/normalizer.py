"""
Text normalizer.

Maps Bengali digits (০-৯) to ASCII and the Bengali full stop (।) to a
period. Substitution is one character for one character, so offsets in the
normalized text line up with the raw OCR output.
"""

from __future__ import annotations

import re

BENGALI_DIGITS = "০১২৩৪৫৬৭৮৯"
DANDA = "।"

_DIGIT_TABLE = str.maketrans({d: str(i) for i, d in enumerate(BENGALI_DIGITS)})
_TEXT_TABLE = str.maketrans({**{d: str(i) for i, d in enumerate(BENGALI_DIGITS)}, DANDA: "."})

# OCR noise dropped before anchor detection (table rules, guillemets)
_TABLE_NOISE = re.compile(r"[|\[\]\xab\xbb]")


def normalize_digits(text: str) -> str:
    """Convert Bengali digits to ASCII digits."""
    if not text:
        return text
    return text.translate(_DIGIT_TABLE)


def normalize_text(text: str) -> str:
    """Convert Bengali digits and the full stop to their ASCII forms."""
    if not text:
        return text
    return text.translate(_TEXT_TABLE)


def prepare_for_segmentation(text: str) -> str:
    """
    Normalize raw OCR output for the segmenter.

    Unifies line endings and drops table-rule characters on top of
    normalize_text().
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n")
    return _TABLE_NOISE.sub("", normalize_text(text))
