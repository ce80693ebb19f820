"""
Repository pattern for voter persistence.

Defines the storage interfaces the import service depends on and
in-memory implementations used by tests and the CLI.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class VoterRepository(ABC):
    """
    Abstract storage for voter rows.

    The interface is database-agnostic; rows are plain dicts with
    snake_case keys.
    """

    @abstractmethod
    def insert_batch(self, center_id: str, owner_id: str, docs: List[dict[str, Any]]) -> int:
        """
        Insert one batch of voter rows.

        Args:
            center_id: Center the voters belong to
            owner_id: User performing the import
            docs: Rows to insert

        Returns:
            Number of rows inserted

        Raises:
            Exception: On any storage failure; the batch is not inserted
        """
        pass


class CenterDirectory(ABC):
    """Lookup of voting centers and their ownership."""

    @abstractmethod
    def is_owned_by(self, center_id: str, owner_id: str) -> bool:
        """True if the center exists and belongs to the owner."""
        pass

    @abstractmethod
    def refresh_voter_count(self, center_id: str) -> int:
        """Recount the center's voters and store the count."""
        pass


class InMemoryVoterRepository(VoterRepository):
    """Voter rows held in a list."""

    def __init__(self):
        self.rows: List[dict[str, Any]] = []
        self._lock = threading.Lock()

    def insert_batch(self, center_id: str, owner_id: str, docs: List[dict[str, Any]]) -> int:
        with self._lock:
            for doc in docs:
                self.rows.append({**doc, "center_id": center_id, "created_by": owner_id})
        return len(docs)

    def count(self, center_id: str) -> int:
        with self._lock:
            return sum(1 for row in self.rows if row["center_id"] == center_id)


@dataclass
class Center:
    id: str
    owner_id: str
    name: str = ""
    voter_count: int = 0


class InMemoryCenterDirectory(CenterDirectory):
    """Centers held in a dict; counts come from an in-memory repository."""

    def __init__(self, repository: Optional[InMemoryVoterRepository] = None):
        self.repository = repository
        self.centers: Dict[str, Center] = {}

    def add_center(self, center_id: str, owner_id: str, name: str = "") -> Center:
        center = Center(id=center_id, owner_id=owner_id, name=name)
        self.centers[center_id] = center
        return center

    def is_owned_by(self, center_id: str, owner_id: str) -> bool:
        center = self.centers.get(center_id)
        return center is not None and center.owner_id == owner_id

    def refresh_voter_count(self, center_id: str) -> int:
        center = self.centers.get(center_id)
        if center is None:
            return 0
        if self.repository is not None:
            center.voter_count = self.repository.count(center_id)
        return center.voter_count
