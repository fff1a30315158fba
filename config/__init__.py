"""HitExport configuration package."""

from config.defaults import (
    CSV_HEADER,
    DATE_FORMAT,
    EXPORT_FILENAME_TEMPLATE,
    PACING_DELAY_SECONDS,
    PAGE_SIZE,
    START_CURSOR,
)
from config.settings import ExportConfig

__all__ = [
    "ExportConfig",
    "CSV_HEADER",
    "DATE_FORMAT",
    "EXPORT_FILENAME_TEMPLATE",
    "PACING_DELAY_SECONDS",
    "PAGE_SIZE",
    "START_CURSOR",
]
