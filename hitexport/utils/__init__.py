"""HitExport utilities package.

Stateless helpers with no external calls.
"""

from hitexport.utils.date_utils import format_rfc3339, to_utc
from hitexport.utils.logging_utils import configure_logging, get_job_logger, get_logger

__all__ = [
    "format_rfc3339",
    "to_utc",
    "configure_logging",
    "get_logger",
    "get_job_logger",
]
