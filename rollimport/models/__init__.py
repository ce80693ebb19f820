"""
Data models for the voter roll import application.

These models represent the core data structures and are designed
to be easily serializable to JSON and mappable to SQL database tables.
"""

from .voter import VoterRecord, Gender, MERGEABLE_FIELDS
from .document import ImportResult, PageResult, METHOD_OCR, METHOD_TEXT
from .job import ImportJob, JobProgress, JobStatus, new_job_id

__all__ = [
    # Voter models
    "VoterRecord",
    "Gender",
    "MERGEABLE_FIELDS",

    # Document models
    "ImportResult",
    "PageResult",
    "METHOD_OCR",
    "METHOD_TEXT",

    # Job models
    "ImportJob",
    "JobProgress",
    "JobStatus",
    "new_job_id",
]
