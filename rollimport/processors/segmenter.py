"""
Anchor-based segmenter.

Splits one strategy's recognized page text into per-record chunks. A
record starts at an anchor, "<serial>. নাম: <name>", and runs until the next
anchor or the end of the text. Anchors keep the order they appear in the
text; they are not re-sorted by serial.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .field_rules import ANCHOR_PATTERN, FEMALE_MARKER, MALE_MARKER
from .normalizer import normalize_digits
from ..models import Gender


def canonical_serial(serial_raw: str) -> str:
    """
    Record key for a raw serial: ASCII digits without leading zeros.

    "০৫", "05" and "5" all map to "5"; an all-zero serial maps to "0".
    """
    return normalize_digits(serial_raw).lstrip("0") or "0"


@dataclass(frozen=True)
class Anchor:
    """A detected record start."""
    offset: int
    serial_raw: str
    name_raw: str

    @property
    def cr(self) -> str:
        return canonical_serial(self.serial_raw)

    @property
    def serial_no(self) -> int:
        return int(self.cr)


def find_anchors(text: str) -> List[Anchor]:
    """Find all record anchors in first-occurrence order."""
    return [
        Anchor(offset=m.start(), serial_raw=m.group(1), name_raw=m.group(2).strip())
        for m in ANCHOR_PATTERN.finditer(text)
    ]


def split_chunks(text: str, anchors: List[Anchor]) -> List[Tuple[Anchor, str]]:
    """
    Pair each anchor with its chunk of text.

    A chunk spans from its anchor's offset to the next anchor's offset, the
    last one to the end of the text. No anchors means no chunks.
    """
    chunks = []
    for i, anchor in enumerate(anchors):
        end = anchors[i + 1].offset if i + 1 < len(anchors) else len(text)
        chunks.append((anchor, text[anchor.offset:end]))
    return chunks


def detect_gender(text: str, default: Gender = Gender.UNKNOWN) -> Gender:
    """
    Detect the gender marker printed in a page header.

    Rolls are printed separately for men and women, so the marker applies
    to every record on the page. Returns `default` when no marker is found.
    """
    if FEMALE_MARKER in text:
        return Gender.FEMALE
    if MALE_MARKER in text:
        return Gender.MALE
    return default
