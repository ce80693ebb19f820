"""
Service layer.
"""

from .import_service import ImportService, create_job_store, to_storage_doc

__all__ = [
    "ImportService",
    "create_job_store",
    "to_storage_doc",
]
