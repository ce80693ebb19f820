"""
Centralized configuration management.

Configuration is loaded from:
1. Environment variables
2. .env file (if present)
3. Default values

Usage:
    from rollimport.config import get_config
    config = get_config()
    print(config.ocr.languages)  # "ben" unless OCR_LANGUAGES is set
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env on module import (existing environment wins)
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)


def _get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class OCRConfig:
    """OCR (Tesseract) configuration."""
    languages: str = field(default_factory=lambda: os.getenv("OCR_LANGUAGES", "ben"))
    tesseract_path: str = field(default_factory=lambda: os.getenv("TESSERACT_PATH", ""))

    # Strategy A: whole page, automatic page segmentation with OSD
    full_page_psm: int = field(default_factory=lambda: _get_int_env("OCR_FULL_PAGE_PSM", 1))
    # Strategy B: vertical strips, each read as a single uniform block
    column_psm: int = field(default_factory=lambda: _get_int_env("OCR_COLUMN_PSM", 6))
    column_count: int = field(default_factory=lambda: _get_int_env("OCR_COLUMN_COUNT", 3))

    # Per-invocation ceiling; a timed-out call yields empty text
    timeout_sec: int = field(default_factory=lambda: _get_int_env("OCR_TIMEOUT_SEC", 120))


@dataclass
class RenderConfig:
    """PDF page rendering (poppler via pdf2image)."""
    dpi: int = field(default_factory=lambda: _get_int_env("RENDER_DPI", 300))
    timeout_sec: int = field(default_factory=lambda: _get_int_env("RENDER_TIMEOUT_SEC", 600))

    # First rendered page is treated as a cover when the document has at least this many pages
    cover_skip_min_pages: int = field(default_factory=lambda: _get_int_env("COVER_SKIP_MIN_PAGES", 3))


@dataclass
class TextLayerConfig:
    """Direct text-layer extraction for text-native PDFs."""
    enabled: bool = field(default_factory=lambda: _get_bool_env("TEXT_LAYER_ENABLED", True))
    min_script_chars: int = field(default_factory=lambda: _get_int_env("TEXT_LAYER_MIN_SCRIPT_CHARS", 100))


@dataclass
class MergeConfig:
    """
    Record validation, cleanup and cross-strategy merge heuristics.

    label_penalty is subtracted from a value's script-density score for
    every label token found inside it. The weights are untuned; override
    them from the environment when validating against a new corpus.
    """
    label_penalty: int = field(default_factory=lambda: _get_int_env("MERGE_LABEL_PENALTY", 10))
    min_name_script_chars: int = field(default_factory=lambda: _get_int_env("MIN_NAME_SCRIPT_CHARS", 2))

    # Doubled-address detection
    address_probe_len: int = 20
    address_probe_offset: int = 10
    address_min_len: int = 40


@dataclass
class JobConfig:
    """Background import job configuration."""
    max_workers: int = field(default_factory=lambda: _get_int_env("JOB_MAX_WORKERS", 2))
    store: str = field(default_factory=lambda: os.getenv("JOB_STORE", "memory").strip().lower())
    store_dir: str = field(default_factory=lambda: os.getenv("JOB_STORE_DIR", ""))


@dataclass
class PersistConfig:
    """Record persistence configuration."""
    batch_size: int = field(default_factory=lambda: _get_int_env("PERSIST_BATCH_SIZE", 500))


@dataclass
class UploadConfig:
    """Submitted document limits."""
    max_bytes: int = field(default_factory=lambda: _get_int_env("UPLOAD_MAX_BYTES", 50 * 1024 * 1024))


@dataclass
class DBConfig:
    """Database configuration (PostgreSQL)."""
    host: str = field(default_factory=lambda: os.getenv("DB_HOST", ""))
    port: int = field(default_factory=lambda: _get_int_env("DB_PORT", 5432))
    name: str = field(default_factory=lambda: os.getenv("DB_NAME", ""))
    user: str = field(default_factory=lambda: os.getenv("DB_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("DB_PASSWORD", ""))
    schema: str = field(default_factory=lambda: os.getenv("DB_SCHEMA", "public"))
    ssl_mode: str = field(default_factory=lambda: os.getenv("DB_SSL_MODE", "prefer"))

    @property
    def is_configured(self) -> bool:
        """Check if minimal DB config is present."""
        return bool(self.host and self.name and self.user)


@dataclass
class Config:
    """
    Main application configuration.

    All settings are loaded from environment variables with sensible defaults.
    Set DEBUG=1 in environment to enable debug mode.
    """

    # Base directory (project root)
    base_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    logs_dir: Path = field(default=None)
    # Parent of per-job temporary working directories
    work_dir: Path = field(default=None)

    # Debug mode (enables verbose logging and keeps job working directories)
    debug: bool = field(default_factory=lambda: _get_bool_env("DEBUG", False))

    # Sub-configurations
    ocr: OCRConfig = field(default_factory=OCRConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    text_layer: TextLayerConfig = field(default_factory=TextLayerConfig)
    merge: MergeConfig = field(default_factory=MergeConfig)
    jobs: JobConfig = field(default_factory=JobConfig)
    persist: PersistConfig = field(default_factory=PersistConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    db: DBConfig = field(default_factory=DBConfig)

    def __post_init__(self):
        """Resolve paths after initialization."""
        if self.logs_dir is None:
            self.logs_dir = self.base_dir / os.getenv("LOG_DIR", "logs")
        if self.work_dir is None:
            self.work_dir = Path(os.getenv("WORK_DIR", "") or tempfile.gettempdir())

    @property
    def keep_intermediate_files(self) -> bool:
        """Whether to keep rendered pages and column strips after a job."""
        return self.debug or _get_bool_env("KEEP_INTERMEDIATE", False)


# Global config instance (lazily initialized)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
