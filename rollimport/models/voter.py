"""
Voter data models.

Represents individual voter records extracted from voter roll pages. The
same shape is used at every pipeline stage: a candidate extracted by one
OCR strategy, the per-page merge of both strategies, and the final
document-wide record.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any


class Gender(str, Enum):
    """Gender of a voter as printed in the roll's page header."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Gender":
        """Accept enum values, their names, or the Bengali header words."""
        if isinstance(value, Gender):
            return value
        text = str(value or "").strip()
        if not text:
            return cls.UNKNOWN
        if text in BENGALI_GENDER_WORDS:
            return BENGALI_GENDER_WORDS[text]
        try:
            return cls(text.lower())
        except ValueError:
            return cls.UNKNOWN


BENGALI_GENDER_WORDS = {
    "পুরুষ": Gender.MALE,
    "মহিলা": Gender.FEMALE,
    "নারী": Gender.FEMALE,
    "অন্যান্য": Gender.OTHER,
    "হিজড়া": Gender.OTHER,
}


# Python attribute -> wire key
WIRE_KEYS = {
    "serial_no": "serialNo",
    "cr": "cr",
    "voter_no": "voterNo",
    "nid": "nid",
    "name": "name",
    "father_name": "fatherName",
    "mother_name": "motherName",
    "husband_name": "husbandName",
    "gender": "gender",
    "occupation": "occupation",
    "date_of_birth": "dateOfBirth",
    "address": "address",
    "area": "area",
}

# Fields reconciled by the per-page merge and the global dedup, in order
MERGEABLE_FIELDS = (
    "name",
    "voter_no",
    "nid",
    "father_name",
    "mother_name",
    "husband_name",
    "occupation",
    "date_of_birth",
    "address",
    "area",
    "gender",
)


@dataclass
class VoterRecord:
    """
    One voter row from the roll.

    `cr` is the record key: the serial number as a canonical decimal
    string. Merges and dedup compare `cr` by string equality.
    """

    serial_no: int = 0
    cr: str = ""

    name: str = ""
    voter_no: str = ""
    nid: str = ""

    father_name: str = ""
    mother_name: str = ""
    husband_name: str = ""

    gender: Gender = Gender.UNKNOWN
    occupation: str = ""
    date_of_birth: str = ""  # free-form, usually DD/MM/YYYY
    address: str = ""
    area: str = ""

    def __post_init__(self):
        self.gender = Gender.parse(self.gender)

    def is_blank(self, field_name: str) -> bool:
        """True when a field carries no information (unknown gender counts as blank)."""
        value = getattr(self, field_name)
        if field_name == "gender":
            return value == Gender.UNKNOWN
        return not value

    def copy(self) -> "VoterRecord":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire shape (camelCase keys)."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[WIRE_KEYS[f.name]] = value.value if isinstance(value, Gender) else value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VoterRecord":
        """Create a record from the wire shape; snake_case keys are accepted too."""
        kwargs: dict[str, Any] = {}
        for attr, key in WIRE_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        for attr in list(kwargs):
            if kwargs[attr] is None:
                del kwargs[attr]
        if "serial_no" in kwargs:
            try:
                kwargs["serial_no"] = int(kwargs["serial_no"])
            except (TypeError, ValueError):
                del kwargs["serial_no"]
        for attr in ("cr", "name", "voter_no", "nid", "father_name", "mother_name",
                     "husband_name", "occupation", "date_of_birth", "address", "area"):
            if attr in kwargs:
                kwargs[attr] = str(kwargs[attr])
        return cls(**kwargs)
