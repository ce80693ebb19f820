"""
Document models.

Represents the result of importing one voter roll PDF.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Any

from .voter import VoterRecord


METHOD_TEXT = "text-extraction"
METHOD_OCR = "ocr"


@dataclass
class PageResult:
    """Per-page diagnostics for the dual-strategy OCR pass."""

    page_number: int = 0  # 1-based index among processed pages
    page_name: str = ""  # e.g. "page-03.png"

    strategy_a_count: int = 0  # whole-page recognition
    strategy_b_count: int = 0  # column-split recognition
    merged_count: int = 0

    processing_time_sec: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["processing_time_sec"] = round(self.processing_time_sec, 3)
        return data


@dataclass
class ImportResult:
    """
    Final output of one import.

    `voters` is deduplicated across pages and sorted by serial number.
    """

    voters: List[VoterRecord] = field(default_factory=list)
    total_pages: int = 0
    method: str = METHOD_OCR
    pages: List[PageResult] = field(default_factory=list)

    @property
    def total_extracted(self) -> int:
        return len(self.voters)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape of the poll response's `data` member."""
        return {
            "voters": [v.to_dict() for v in self.voters],
            "totalPages": self.total_pages,
            "totalExtracted": self.total_extracted,
            "method": self.method,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportResult":
        return cls(
            voters=[VoterRecord.from_dict(v) for v in data.get("voters", [])],
            total_pages=int(data.get("totalPages", 0)),
            method=data.get("method", METHOD_OCR),
        )
