"""
Field cleaner.

Removes the artifacts OCR leaves in extracted values when neighbouring
table columns are read onto the same line: foreign labels and everything
after them, a repeated copy of the value's own label, stray digit runs from
identifier columns, and doubled address blocks.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .field_rules import (
    ARTIFACT_LABELS,
    DATE_WORD,
    OCCUPATION,
    POST_MERGE_LABEL_PATTERNS,
)
from ..config import MergeConfig
from ..models import VoterRecord

_LONG_DIGIT_RUN = re.compile(r"[0-9০-৯]{5,}")
_SPECIAL_CHARS = re.compile(r"[\"“”*#$|()]")
_WHITESPACE = re.compile(r"\s+")
_TRAILING_JUNK = re.compile(r"[,;:\s]+$")
_TRAILING_COMMA = re.compile(r"[,\s]+$")

POST_CLEAN_FIELDS = ("father_name", "mother_name", "husband_name", "address", "occupation")


def truncate_at_labels(value: str, own_label: Optional[str] = None) -> str:
    """
    Cut a value at the first foreign label, and at a repeat of its own label.

    A label at position 0 is left alone: the value would otherwise be
    emptied, and the rule that matched already consumed the real label.
    """
    cut = len(value)
    for label in ARTIFACT_LABELS:
        if label == own_label:
            continue
        idx = value.find(label)
        if 0 < idx < cut:
            cut = idx
    if own_label:
        idx = value.find(own_label, 1)
        if 0 < idx < cut:
            cut = idx
    return value[:cut]


def clean_field(value: str, own_label: Optional[str] = None) -> str:
    """Clean one extracted text value."""
    if not value:
        return ""
    cleaned = truncate_at_labels(value, own_label)
    cleaned = _LONG_DIGIT_RUN.sub("", cleaned)
    cleaned = _SPECIAL_CHARS.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def truncate_doubled_address(address: str, config: Optional[MergeConfig] = None) -> str:
    """
    Drop a second copy of an address block.

    When two merged columns carry the same address, the value's leading
    probe shows up again further along; keep only the text before it.
    """
    config = config or MergeConfig()
    if not address or len(address) <= config.address_min_len:
        return address

    probe = address[:config.address_probe_len]
    second = address.find(probe, config.address_probe_offset)
    if 0 < second < len(address) - config.address_probe_offset:
        return _TRAILING_COMMA.sub("", address[:second].strip())
    return address


def _cut_at_post_merge_labels(value: str) -> str:
    for pattern in POST_MERGE_LABEL_PATTERNS:
        match = pattern.search(value)
        if match and match.start() > 0:
            value = value[:match.start()].strip()
    return _TRAILING_JUNK.sub("", value).strip()


def _cut_mother_bleed(value: str) -> str:
    # The occupation/date line often wraps into the mother's name column
    for token in (OCCUPATION, DATE_WORD):
        idx = value.find(token)
        if idx >= 0:
            value = value[:idx].strip()
    return _TRAILING_JUNK.sub("", value).strip()


def post_clean(records: Iterable[VoterRecord], config: Optional[MergeConfig] = None) -> List[VoterRecord]:
    """
    Second cleanup pass over merged records.

    Returns new records; the inputs are not modified.
    """
    cleaned = []
    for record in records:
        record = record.copy()
        if record.address:
            record.address = truncate_doubled_address(record.address, config)
        for field_name in POST_CLEAN_FIELDS:
            value = getattr(record, field_name)
            if value:
                setattr(record, field_name, _cut_at_post_merge_labels(value))
        if record.mother_name:
            record.mother_name = _cut_mother_bleed(record.mother_name)
        cleaned.append(record)
    return cleaned
