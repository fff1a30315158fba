"""Logging utilities for HitExport.

Provides structured logging with export-job context injection and YAML-based
configuration loading. All loggers are namespaced under 'hitexport'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, MutableMapping, Optional

import yaml

if TYPE_CHECKING:
    from hitexport.models.export import ExportJob


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Override the log file path.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        if log_file and "handlers" in cfg:
            for handler_cfg in cfg["handlers"].values():
                if handler_cfg.get("class") == "logging.FileHandler":
                    handler_cfg["filename"] = log_file

        if log_level and "loggers" in cfg:
            cfg["loggers"].setdefault("hitexport", {})["level"] = log_level.upper()

        logging.config.dictConfig(cfg)
    else:
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'hitexport'.

    Args:
        name: Module or component name (e.g., "sources.http_source").

    Returns:
        Logger instance with full 'hitexport.<name>' namespace.
    """
    if name.startswith("hitexport"):
        return logging.getLogger(name)
    return logging.getLogger(f"hitexport.{name}")


class JobContextAdapter(logging.LoggerAdapter):
    """Logger adapter that prefixes every record with live export-job context.

    The job is read at log time, so the cursor and row count reflect the
    progress reached when the message is emitted.

    Usage:
        logger = get_job_logger("pipeline", job)
        logger.info("export started")
        # Output: [INFO] hitexport.pipeline: [tenant=example cursor=0 rows=0] export started
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        job = self.extra.get("job")
        if job is None:
            return msg, kwargs
        prefix = f"[tenant={job.tenant.code} cursor={job.cursor} rows={job.rows}]"
        return f"{prefix} {msg}", kwargs


def get_job_logger(name: str, job: "ExportJob") -> JobContextAdapter:
    """Get a job-context-aware logger adapter.

    Args:
        name: Module or component name.
        job: The export job whose tenant, cursor, and row count to report.

    Returns:
        LoggerAdapter that prefixes all messages with the job context.
    """
    return JobContextAdapter(get_logger(name), {"job": job})
