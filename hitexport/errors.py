"""Exception taxonomy for HitExport.

Every failure that can end an export run maps to exactly one ExportError
subclass. The pipeline catches these at its boundary and turns them into an
ExportFailure outcome; callers of ExportPipeline.run() never see them raised.
"""

from __future__ import annotations

from typing import Optional


class ExportError(Exception):
    """Base class for all export failures.

    Args:
        message: Human-readable description of the failure.
        cause: Underlying exception, if any.
    """

    stage: str = "export"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.cause is not None:
            return f"{msg}: {self.cause}"
        return msg


class FetchError(ExportError):
    """The data source failed to return a page."""

    stage = "fetch"


class EncodeError(ExportError):
    """The CSV or gzip layer failed to accept or flush bytes."""

    stage = "encode"


class FinalizeError(ExportError):
    """Closing the gzip trailer, syncing, or closing the temp file failed."""

    stage = "finalize"


class PublishError(ExportError):
    """The atomic move to the final artifact path failed."""

    stage = "publish"


class DigestError(ExportError):
    """Hashing the published artifact failed; the artifact exists but is unverified."""

    stage = "digest"


class NotifyError(ExportError):
    """Delivering the completion notice failed. Logged only, never fatal."""

    stage = "notify"


class ExportCancelled(ExportError):
    """The caller's cancellation signal was set before the next page fetch."""

    stage = "cancel"
