"""
Field extractor.

Turns one strategy's recognized page text into voter records:
normalize -> find anchors -> split chunks -> apply FIELD_RULES -> clean.
Records whose name carries fewer than two Bengali letters are dropped
here and never reach the merge stages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from .field_cleaner import clean_field, truncate_doubled_address
from .field_rules import (
    ADDRESS,
    DATE,
    DIGIT_RUN,
    FIELD_RULES,
    INLINE_ANCHOR_PATTERN,
    NAME_STOP_PATTERN,
    LabelRule,
)
from .normalizer import normalize_digits, prepare_for_segmentation
from .segmenter import Anchor, detect_gender, find_anchors, split_chunks
from ..config import MergeConfig
from ..models import Gender, VoterRecord

SCRIPT_CHAR = re.compile(r"[ঀ-৿]")

_LONG_DIGIT_RUN = re.compile(r"[0-9০-৯]{5,}")
_NON_NAME_CHARS = re.compile(r"[^ঀ-৿\s.]")
_WHITESPACE = re.compile(r"\s+")


def script_char_count(value: str) -> int:
    """Number of Bengali-block characters in a value."""
    return len(SCRIPT_CHAR.findall(value or ""))


@dataclass
class ParseResult:
    """Records from one text, plus the gender marker to carry to the next page."""
    voters: List[VoterRecord] = field(default_factory=list)
    gender: Gender = Gender.UNKNOWN
    anchors_found: int = 0


class FieldExtractor:
    """Apply the label rule table to record chunks."""

    def __init__(self, config: Optional[MergeConfig] = None, rules: tuple[LabelRule, ...] = FIELD_RULES):
        self.config = config or MergeConfig()
        self.rules = rules

    def clean_name(self, name_raw: str) -> str:
        """
        Name payload up to any leaked anchor or neighbouring label, without
        digit runs or Latin noise.
        """
        name = INLINE_ANCHOR_PATTERN.split(name_raw, maxsplit=1)[0]
        name = NAME_STOP_PATTERN.split(name, maxsplit=1)[0]
        name = _LONG_DIGIT_RUN.sub("", name)
        name = _NON_NAME_CHARS.sub("", name)
        return _WHITESPACE.sub(" ", name).strip()

    def is_valid(self, record: VoterRecord) -> bool:
        return script_char_count(record.name) >= self.config.min_name_script_chars

    def extract(self, anchor: Anchor, chunk: str, page_gender: Gender = Gender.UNKNOWN,
                index: int = 0) -> VoterRecord:
        """
        Build one record from an anchor's chunk.

        Args:
            anchor: The record's anchor
            chunk: Text from the anchor to the next anchor
            page_gender: Gender detected in the page header
            index: 0-based position of the anchor, used when the serial is 0
        """
        record = VoterRecord(
            serial_no=anchor.serial_no or index + 1,
            cr=anchor.cr,
            name=self.clean_name(anchor.name_raw),
            gender=detect_gender(chunk.split(ADDRESS, 1)[0], page_gender),
        )

        matched = set()
        for rule in self.rules:
            if rule.fallback_of and rule.fallback_of in matched:
                continue
            match = rule.pattern.search(chunk)
            if not match:
                continue
            matched.add(rule.name)
            for group, (attr, kind) in enumerate(zip(rule.fields, rule.kinds), start=1):
                setattr(record, attr, self._convert(match.group(group), kind, rule.label))

        if record.address:
            record.address = truncate_doubled_address(record.address, self.config)
        return record

    def _convert(self, raw: str, kind: str, label: Optional[str]) -> str:
        if kind == DIGIT_RUN:
            return normalize_digits(_WHITESPACE.sub("", raw))
        if kind == DATE:
            return normalize_digits(raw.strip())
        return clean_field(raw, label)

    def parse(self, text: str, carried_gender: Gender = Gender.UNKNOWN) -> ParseResult:
        """
        Extract all valid records from one recognized text.

        Args:
            text: Raw OCR (or text-layer) output
            carried_gender: Gender detected on an earlier page
        """
        cleaned = prepare_for_segmentation(text)
        anchors = find_anchors(cleaned)
        # Only the header above the first record carries the page marker
        header = cleaned[:anchors[0].offset] if anchors else cleaned
        gender = detect_gender(header, carried_gender)

        result = ParseResult(gender=gender, anchors_found=len(anchors))

        for index, (anchor, chunk) in enumerate(split_chunks(cleaned, anchors)):
            record = self.extract(anchor, chunk, gender, index)
            if self.is_valid(record):
                result.voters.append(record)
        return result
