"""
Cross-strategy merger and global deduplicator.

Per page, the whole-page and column-split OCR passes each produce a record
list. merge_strategies() reconciles them field by field; deduplicate()
then folds every page of a document together without ever overriding a
value that is already set.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .field_cleaner import post_clean
from .field_extractor import script_char_count
from .field_rules import ARTIFACT_LABELS, DOB_FULL_PATTERN
from ..config import MergeConfig
from ..models import MERGEABLE_FIELDS, VoterRecord

IDENTIFIER_FIELDS = ("voter_no", "nid")


def label_artifact_count(value: str) -> int:
    """Occurrences of any known label token inside a value."""
    return sum(value.count(label) for label in ARTIFACT_LABELS)


def score_field(value: str, penalty: int = 10) -> int:
    """Script density minus a penalty for each embedded label."""
    if not value:
        return 0
    return script_char_count(value) - penalty * label_artifact_count(value)


def _prefer_new(field_name: str, existing: str, new: str, config: MergeConfig) -> bool:
    if field_name in IDENTIFIER_FIELDS:
        # more digits recovered
        return len(new) > len(existing)
    if field_name == "date_of_birth":
        return bool(DOB_FULL_PATTERN.match(new)) and not DOB_FULL_PATTERN.match(existing)
    if field_name == "gender":
        return False
    return score_field(new, config.label_penalty) > score_field(existing, config.label_penalty)


def _sort_by_serial(records: Iterable[VoterRecord]) -> List[VoterRecord]:
    return sorted(records, key=lambda r: r.serial_no)


def merge_strategies(
    strategy_a: Iterable[VoterRecord],
    strategy_b: Iterable[VoterRecord],
    config: Optional[MergeConfig] = None,
) -> List[VoterRecord]:
    """
    Merge one page's records from both OCR strategies.

    Records are keyed by `cr`. The first record seen for a key (strategy A
    first) seeds the entry; later ones fill blanks and win conflicts only
    by the per-field preference rules. Ties keep the existing value.
    """
    config = config or MergeConfig()
    merged: Dict[str, VoterRecord] = {}

    for voter in list(strategy_a) + list(strategy_b):
        existing = merged.get(voter.cr)
        if existing is None:
            merged[voter.cr] = voter.copy()
            continue
        for field_name in MERGEABLE_FIELDS:
            if voter.is_blank(field_name):
                continue
            new_value = getattr(voter, field_name)
            if existing.is_blank(field_name):
                setattr(existing, field_name, new_value)
            elif _prefer_new(field_name, getattr(existing, field_name), new_value, config):
                setattr(existing, field_name, new_value)

    return post_clean(_sort_by_serial(merged.values()), config)


def deduplicate(records: Iterable[VoterRecord]) -> List[VoterRecord]:
    """
    Fold records from all pages into one list, keyed by `cr`.

    Only blanks are filled; the first non-empty value for a field wins.
    Idempotent: deduplicating an already deduplicated list returns an
    equal list.
    """
    final: Dict[str, VoterRecord] = {}
    for voter in records:
        existing = final.get(voter.cr)
        if existing is None:
            final[voter.cr] = voter.copy()
            continue
        for field_name in MERGEABLE_FIELDS:
            if existing.is_blank(field_name) and not voter.is_blank(field_name):
                setattr(existing, field_name, getattr(voter, field_name))
    return _sort_by_serial(final.values())
