"""
Base processor class and processing context.

Provides common functionality for all document processors including
logging, configuration access and the per-import working directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any, List

from ..config import Config
from ..logger import get_logger
from ..models import PageResult


@dataclass
class ProcessingContext:
    """
    Shared context passed between processors for one import.

    Contains:
    - Configuration
    - Paths (the working directory is owned by exactly one import)
    - Page tracking
    """

    config: Config
    pdf_path: Optional[Path] = None
    work_dir: Optional[Path] = None
    pages_dir: Optional[Path] = None
    strips_dir: Optional[Path] = None

    # Page tracking
    current_page: Optional[str] = None
    total_pages: int = 0
    pages_processed: int = 0
    page_results: List[PageResult] = field(default_factory=list)

    def setup_paths(self, pdf_path: Path, work_dir: Path) -> None:
        """
        Initialize all paths for one import.

        Args:
            pdf_path: Path to the PDF being imported
            work_dir: Temporary directory owned by this import
        """
        self.pdf_path = Path(pdf_path)
        self.work_dir = Path(work_dir)
        self.pages_dir = self.work_dir / "pages"
        self.strips_dir = self.work_dir / "strips"

        self.pages_dir.mkdir(parents=True, exist_ok=True)
        self.strips_dir.mkdir(exist_ok=True)


class BaseProcessor:
    """
    Base class for all document processors.

    Provides:
    - Consistent logging
    - Configuration access
    """

    # Processor name for logging (override in subclass)
    name: str = "BaseProcessor"

    def __init__(self, context: ProcessingContext):
        self.context = context
        self.config = context.config
        self.logger = get_logger(self.name)

    @property
    def debug_mode(self) -> bool:
        """Check if debug mode is enabled."""
        return self.config.debug

    def log_debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message (only in debug mode)."""
        if self.debug_mode:
            extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
            self.logger.debug(f"{message} {extra}".strip())

    def log_info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.info(f"{message} {extra}".strip())

    def log_warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.warning(f"{message} {extra}".strip())
