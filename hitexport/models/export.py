"""Export job and outcome data models for HitExport.

ExportJob is the per-run state threaded through every pipeline transition.
ExportSuccess and ExportFailure are the two terminal outcomes a run returns.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import IO, Optional, Union

from hitexport.errors import ExportError
from hitexport.models.hits import Tenant


class ExportState:
    """Pipeline states recorded on ExportJob.state."""

    IDLE = "IDLE"
    FETCHING = "FETCHING"
    ENCODING = "ENCODING"
    FINALIZING = "FINALIZING"
    PUBLISHED = "PUBLISHED"
    ABORTED = "ABORTED"


@dataclass
class ExportJob:
    """Mutable state of a single export run.

    Created by the pipeline when a run starts and never shared between runs.
    On failure the temp file is removed; on success it becomes the artifact.
    """

    tenant: Tenant
    temp_path: str
    handle: Optional[IO[bytes]] = None
    cursor: int = 0
    rows: int = 0
    pages: int = 0
    state: str = ExportState.IDLE
    started: float = field(default_factory=time.monotonic)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.started


@dataclass
class ExportSuccess:
    """Terminal outcome of a run that published its artifact."""

    tenant: Tenant
    path: str
    rows: int
    size: str          # binary megabytes, one decimal place, e.g. "1.4"
    size_bytes: int
    digest: str        # SHA-256 hex digest of the published file
    cursor: int        # highest hit id exported; resume point for the next run
    elapsed_seconds: float = 0.0

    ok = True


@dataclass
class ExportFailure:
    """Terminal outcome of a run that aborted.

    ``published`` is True only when the artifact reached its final path but
    could not be hashed (DigestError); in every other case nothing was
    published and ``path`` is None.
    """

    tenant: Tenant
    cause: ExportError
    rows: int = 0
    cursor: int = 0
    published: bool = False
    path: Optional[str] = None

    ok = False

    @property
    def stage(self) -> str:
        """Pipeline stage the failure happened in (fetch, encode, ...)."""
        return self.cause.stage


ExportOutcome = Union[ExportSuccess, ExportFailure]
