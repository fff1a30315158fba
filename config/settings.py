"""HitExport — ExportConfig and environment-based configuration loading.

All runtime configuration flows through ExportConfig. No module-level globals,
no hard-coded values. Credentials come exclusively from environment variables.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from config.defaults import (
    DEFAULT_LOG_LEVEL,
    EXPORT_FILENAME_TEMPLATE,
    GZIP_COMPRESSION_LEVEL,
    HTTP_BACKOFF_BASE,
    HTTP_MAX_RETRIES,
    HTTP_REQUEST_TIMEOUT,
    NOTIFY_TIMEOUT,
    PACING_DELAY_SECONDS,
    PAGE_SIZE,
)

# Load .env file if present; silently skip if missing
load_dotenv()


@dataclass
class ExportConfig:
    """Single configuration object passed to the export pipeline at construction.

    All tuneable values, endpoints, and file paths live here.
    Never use module-level globals or hard-coded values in pipeline code.
    """

    # ── Paging and pacing ─────────────────────────────────────────────────────
    page_size: int = field(
        default_factory=lambda: int(os.getenv("EXPORT_PAGE_SIZE", PAGE_SIZE))
    )
    pacing_delay: float = field(
        default_factory=lambda: float(os.getenv("EXPORT_PACING_DELAY", PACING_DELAY_SECONDS))
    )

    # ── Artifact output ───────────────────────────────────────────────────────
    export_dir: str = field(
        default_factory=lambda: os.getenv("EXPORT_DIR", tempfile.gettempdir())
    )
    filename_template: str = EXPORT_FILENAME_TEMPLATE
    compression_level: int = GZIP_COMPRESSION_LEVEL

    # ── HTTP hit source ───────────────────────────────────────────────────────
    source_url: Optional[str] = field(default_factory=lambda: os.getenv("EXPORT_SOURCE_URL"))
    api_token: Optional[str] = field(default_factory=lambda: os.getenv("EXPORT_API_TOKEN"))
    http_max_retries: int = HTTP_MAX_RETRIES
    http_backoff_base: float = HTTP_BACKOFF_BASE
    http_request_timeout: int = HTTP_REQUEST_TIMEOUT

    # ── Notification ──────────────────────────────────────────────────────────
    webhook_url: Optional[str] = field(default_factory=lambda: os.getenv("EXPORT_WEBHOOK_URL"))
    notify_timeout: int = NOTIFY_TIMEOUT

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {self.page_size}")
        if self.pacing_delay < 0:
            raise ValueError(f"pacing_delay must not be negative, got {self.pacing_delay}")
        if not 0 <= self.compression_level <= 9:
            raise ValueError(
                f"compression_level must be between 0 and 9, got {self.compression_level}"
            )
