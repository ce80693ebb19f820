"""
Custom exceptions for the voter roll import application.

All application-specific exceptions inherit from RollImportError.
"""

from __future__ import annotations

from typing import Optional, Any, Sequence


class RollImportError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (for debugging)
        recoverable: Whether the caller can correct the input and retry
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(RollImportError):
    """
    Submission input is missing or unusable.

    Examples:
        - No document or no target center
        - Uploaded file is not a PDF
        - Empty record list
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
    ):
        details = {}
        if field_name:
            details["field_name"] = field_name
        if field_value is not None:
            details["field_value"] = str(field_value)[:100]
        super().__init__(message, details=details, recoverable=True)


class NotFoundError(RollImportError):
    """Target center or job does not exist, or is not owned by the caller."""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None
    ):
        details = {}
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, details=details, recoverable=False)


class ConflictError(RollImportError):
    """
    An import for the same owner and center is still processing.

    The existing job id is carried so the caller can poll it instead of
    resubmitting.
    """

    def __init__(self, message: str, job_id: str):
        super().__init__(message, details={"job_id": job_id}, recoverable=True)
        self.job_id = job_id


class ToolMissingError(RollImportError):
    """Rendering or recognition binaries are not installed on the host."""

    INSTALL_HINT = (
        "Install Tesseract (with the Bengali language pack) and poppler:\n"
        "  - macOS: brew install tesseract tesseract-lang poppler\n"
        "  - Ubuntu: sudo apt install tesseract-ocr tesseract-ocr-ben poppler-utils"
    )

    def __init__(self, missing_tools: Sequence[str]):
        self.missing_tools = list(missing_tools)
        message = (
            f"Scanned PDF import requires {', '.join(self.missing_tools)}. "
            f"{self.INSTALL_HINT}"
        )
        super().__init__(message, recoverable=False)

    def __str__(self) -> str:
        return self.message


class PDFExtractionError(RollImportError):
    """
    Failed to read or render the PDF.

    Examples:
        - Corrupted PDF file
        - Rendering timed out
        - No pages produced
    """

    def __init__(
        self,
        message: str,
        pdf_path: Optional[str] = None,
        page_number: Optional[int] = None
    ):
        details = {}
        if pdf_path:
            details["pdf_path"] = pdf_path
        if page_number is not None:
            details["page_number"] = page_number
        super().__init__(message, details=details, recoverable=False)


class ExtractionEmptyError(RollImportError):
    """The pipeline finished but no valid voter record survived."""

    def __init__(
        self,
        message: str = "No voter records could be extracted from the PDF. Check the PDF format.",
        pages: Optional[int] = None,
        method: Optional[str] = None,
    ):
        details = {}
        if pages is not None:
            details["pages"] = pages
        if method:
            details["method"] = method
        super().__init__(message, details=details, recoverable=False)

    def __str__(self) -> str:
        return self.message


class PartialInsertFailure(RollImportError):
    """
    Some persistence batches failed.

    Never fatal: the successful partial count is still reported.
    """

    def __init__(self, errors: Sequence[str], inserted: int, total: int):
        self.errors = list(errors)
        self.inserted = inserted
        self.total = total
        super().__init__(
            f"{len(self.errors)} batch(es) failed; inserted {inserted}/{total}",
            details={"errors": self.errors},
            recoverable=True,
        )

    def to_dict(self) -> dict:
        """The persist summary: partial count plus the batch errors."""
        return {"inserted": self.inserted, "total": self.total, "errors": self.errors}


class ProcessingAbortedError(RollImportError):
    """
    Processing was aborted through the job's cancellation token.
    """

    def __init__(
        self,
        message: str = "Import cancelled",
        items_processed: int = 0,
        items_total: int = 0
    ):
        details = {
            "items_processed": items_processed,
            "items_total": items_total
        }
        super().__init__(message, details=details, recoverable=True)

    def __str__(self) -> str:
        return self.message
