"""
Data persistence layer.

Provides the repository interfaces the import service depends on and
concrete implementations for storing voters and job state.
"""

from .json_store import JSONJobStore
from .repository import (
    Center,
    CenterDirectory,
    InMemoryCenterDirectory,
    InMemoryVoterRepository,
    VoterRepository,
)

__all__ = [
    "Center",
    "CenterDirectory",
    "InMemoryCenterDirectory",
    "InMemoryVoterRepository",
    "JSONJobStore",
    "VoterRepository",
]
