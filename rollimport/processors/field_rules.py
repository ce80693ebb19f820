"""
Label rule table for Bengali voter roll records.

Each record on the roll is a block of "label: value" lines. OCR merges the
three table columns onto shared lines and misreads label glyphs, so every
rule is a tolerant regular expression that matches the first occurrence of
its label inside a record chunk. Rules are data: the extractor walks
FIELD_RULES in order and never special-cases a field by name.

Digit classes accept both ASCII and Bengali digits so a rule also works on
text that has not been through the normalizer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

DIGITS = "0-9০-৯"
SEP = r"[:：.\-]"

# Label tokens
FATHER = "পিতা"  # father
MOTHER = "মাতা"  # mother
HUSBAND = "স্বামী"  # husband
OCCUPATION = "পেশা"  # occupation
BIRTH = "জন্ম"  # birth
DATE_STEM = "তারি"  # stem of তারিখ (date), last glyph is often misread
DATE_WORD = "তারিখ"
ADDRESS = "ঠিকানা"  # address
VOTER_OCR = "ভোয়ার"  # misreading of ভোটার
VOTER = "ভোটার"  # voter
NAME = "না[মষ]"  # নাম, or the misread নাষ

FEMALE_MARKER = "মহিলা"
MALE_MARKER = "পুরুষ"

# Tokens that end a value: seeing one inside a value means the OCR pulled
# in text from a neighbouring column.
ARTIFACT_LABELS: Tuple[str, ...] = (
    FATHER,
    MOTHER,
    OCCUPATION,
    BIRTH,
    DATE_STEM,
    ADDRESS,
    VOTER_OCR,
    VOTER,
    HUSBAND,
)

# Record start: serial, separator, name label, separator, name payload
ANCHOR_PATTERN = re.compile(
    rf"([{DIGITS}]{{1,4}})\s*[.\-।)]\s*{NAME}\s*[:：;.]\s*([^\n]*)"
)

# Another record's anchor that leaked into a name payload
INLINE_ANCHOR_PATTERN = re.compile(rf"[{DIGITS}]{{1,4}}\s*[.\-]\s*{NAME}")

# A neighbouring column's label, or a second name label, read into a name
# payload. Whole words only: names such as তারিক contain label stems.
NAME_STOP_PATTERN = re.compile(
    r"(?<=\s)(?:"
    + "|".join((FATHER, MOTHER, HUSBAND, OCCUPATION, BIRTH, DATE_WORD, ADDRESS, VOTER_OCR, VOTER, NAME))
    + r")ঃ?(?![ঀ-৿])"
)

_VOTER_HEADER = (
    r"(?:ভো[টযয়]?়?া?র"
    r"|ভা[রত]া?র?"
    r"|র)"
    r"\s*ন[ংমে]্?ব?র?"
)

# label + colon forms that mark a merge artifact inside an already-clean value
POST_MERGE_LABEL_PATTERNS = (
    re.compile(rf"{ADDRESS}\s*:"),
    re.compile(rf"{FATHER}ঃ?\s*:"),
    re.compile(rf"{MOTHER}\s*:"),
    re.compile(rf"{OCCUPATION}\s*:"),
    re.compile(rf"ভো[যয়]?়?া?র\s*ন[ংমে]"),
)

DOB_FULL_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")

# Value kinds
TEXT = "text"
DIGIT_RUN = "digits"
DATE = "date"


@dataclass(frozen=True)
class LabelRule:
    """
    One extraction rule.

    Attributes:
        name: Rule identifier
        fields: Record attributes filled from the pattern's groups 1..n
        kinds: How each captured group is post-processed (text/digits/date)
        pattern: Compiled pattern; first match only
        label: Own label token, exempt from artifact truncation
        fallback_of: Run only when the named rule did not match
    """
    name: str
    fields: Tuple[str, ...]
    kinds: Tuple[str, ...]
    pattern: re.Pattern
    label: Optional[str] = None
    fallback_of: Optional[str] = None


FIELD_RULES: Tuple[LabelRule, ...] = (
    LabelRule(
        name="voter_no",
        fields=("voter_no",),
        kinds=(DIGIT_RUN,),
        pattern=re.compile(
            rf"{_VOTER_HEADER}\s*[:：.\-\s]\s*([{DIGITS}\s]{{5,20}})",
            re.IGNORECASE,
        ),
    ),
    LabelRule(
        name="father_name",
        fields=("father_name",),
        kinds=(TEXT,),
        pattern=re.compile(rf"{FATHER}ঃ?\s*{SEP}\s*([^\n]*)"),
        label=FATHER,
    ),
    LabelRule(
        name="mother_name",
        fields=("mother_name",),
        kinds=(TEXT,),
        pattern=re.compile(rf"{MOTHER}\s*{SEP}\s*([^\n]*)"),
        label=MOTHER,
    ),
    LabelRule(
        name="husband_name",
        fields=("husband_name",),
        kinds=(TEXT,),
        pattern=re.compile(rf"{HUSBAND}\s*{SEP}\s*([^\n]*)"),
        label=HUSBAND,
    ),
    # "পেশা: কৃষক, জন্ম তারিখ: 01/02/1980" on one line
    LabelRule(
        name="occupation_dob",
        fields=("occupation", "date_of_birth"),
        kinds=(TEXT, DATE),
        pattern=re.compile(
            rf"{OCCUPATION}\s*{SEP}\s*([^,\n]*?)(?:[,\s]+)?"
            rf"জন্?ম?া?\s*{DATE_STEM}[খব][:：.\-\s]*"
            rf"([{DIGITS}/.\-]+)"
        ),
        label=OCCUPATION,
    ),
    LabelRule(
        name="date_of_birth",
        fields=("date_of_birth",),
        kinds=(DATE,),
        pattern=re.compile(rf"{DATE_STEM}[খব][:：.\-\s]*([{DIGITS}/.\-]{{6,12}})"),
        fallback_of="occupation_dob",
    ),
    LabelRule(
        name="occupation",
        fields=("occupation",),
        kinds=(TEXT,),
        pattern=re.compile(rf"{OCCUPATION}\s*{SEP}\s*([^\n,]{{2,30}})"),
        label=OCCUPATION,
        fallback_of="occupation_dob",
    ),
    LabelRule(
        name="address",
        fields=("address",),
        kinds=(TEXT,),
        pattern=re.compile(rf"{ADDRESS}\s*{SEP}\s*([^\n]*)"),
        label=ADDRESS,
    ),
    LabelRule(
        name="nid",
        fields=("nid",),
        kinds=(DIGIT_RUN,),
        pattern=re.compile(
            r"(?:NID|জাতী(?:\u09df|য়)\s*পরিচ(?:\u09df|য়))"
            r"\s*(?:পত্র)?\s*(?:নং)?\s*"
            rf"{SEP}\s*([{DIGITS}]+)",
            re.IGNORECASE,
        ),
    ),
)
