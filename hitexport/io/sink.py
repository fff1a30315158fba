"""Streaming CSV-in-gzip encoder for HitExport artifacts.

RecordSink wraps a caller-owned binary file handle in a gzip stream and a CSV
writer, and appends one hit at a time so an export never holds more than the
current page in memory. The sink never closes or removes the file handle;
that belongs to the pipeline.
"""

from __future__ import annotations

import csv
import gzip
import io
import logging
from decimal import Decimal
from pathlib import Path
from typing import IO, Iterator, List, Optional, Sequence

from config.defaults import CSV_HEADER, GZIP_COMPRESSION_LEVEL
from hitexport.errors import EncodeError, FinalizeError
from hitexport.models.hits import Hit
from hitexport.utils.date_utils import format_rfc3339

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    # Plain decimal, never exponent notation: 1e16 renders as 10000000000000000
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return format(Decimal(repr(value)), "f")
    return str(value)


def format_size(size: Optional[Sequence[float]]) -> str:
    """Render a screen size as comma-joined numbers, or "" when absent.

    >>> format_size((1920, 1080, 1.5))
    '1920,1080,1.5'
    """
    if not size:
        return ""
    return ",".join(_format_number(v) for v in size)


def render_row(hit: Hit) -> List[str]:
    """Render a hit as one CSV row in CSV_HEADER column order."""
    return [
        hit.path,
        hit.title,
        "true" if hit.event else "false",
        str(hit.bot),
        str(hit.session),
        hit.ref,
        hit.browser,
        format_size(hit.size),
        hit.location,
        format_rfc3339(hit.created_at),
    ]


class RecordSink:
    """Incremental gzip-compressed CSV writer over an open binary file.

    Lifecycle: open() → write_record()* / flush() → finalize(), or abort() on
    any failure path. Bytes are not durable until finalize() has returned and
    the caller has synced the underlying file.

    Args:
        handle: Binary file handle to write the compressed stream to.
        compression_level: zlib compression level (0–9).
    """

    def __init__(
        self,
        handle: IO[bytes],
        compression_level: int = GZIP_COMPRESSION_LEVEL,
    ) -> None:
        self._handle = handle
        self._compression_level = compression_level
        self._gzip: Optional[gzip.GzipFile] = None
        self._text: Optional[io.TextIOWrapper] = None
        self._writer = None
        self.closed = False

    def open(self) -> "RecordSink":
        """Start the gzip stream and write the header row.

        Raises:
            EncodeError: If the header cannot be written.
        """
        if self._text is not None:
            raise EncodeError("sink already open")
        # Empty filename and zero mtime keep the gzip header free of the temp
        # file name and the wall clock, so equal input gives equal bytes.
        try:
            # GzipFile writes its header to the handle on construction
            self._gzip = gzip.GzipFile(
                filename="",
                mode="wb",
                compresslevel=self._compression_level,
                fileobj=self._handle,
                mtime=0,
            )
            self._text = io.TextIOWrapper(self._gzip, encoding="utf-8", newline="")
            self._writer = csv.writer(self._text, lineterminator="\n")
            self._writer.writerow(CSV_HEADER)
        except (OSError, ValueError, csv.Error) as exc:
            raise EncodeError("writing header failed", exc) from exc
        return self

    def write_record(self, hit: Hit) -> None:
        """Append one hit as a CSV row.

        Raises:
            EncodeError: If the row cannot be encoded or the buffer cannot be drained.
        """
        if self._writer is None or self.closed:
            raise EncodeError("sink is not open")
        try:
            self._writer.writerow(render_row(hit))
        except (OSError, ValueError, csv.Error) as exc:
            raise EncodeError(f"writing hit {hit.id} failed", exc) from exc

    def flush(self) -> None:
        """Push buffered rows through the CSV layer into the gzip stream.

        Raises:
            EncodeError: If a downstream write fault is detected.
        """
        if self._text is None or self.closed:
            raise EncodeError("sink is not open")
        try:
            self._text.flush()
        except (OSError, ValueError) as exc:
            raise EncodeError("flush failed", exc) from exc

    def finalize(self) -> None:
        """Close the CSV and gzip layers, writing the gzip trailer.

        Must be the last call on the sink. The file handle stays open.

        Raises:
            FinalizeError: If the trailer cannot be written; the output is invalid.
        """
        if self._text is None or self.closed:
            raise FinalizeError("sink is not open")
        self.closed = True
        try:
            self._text.close()
        except (OSError, ValueError) as exc:
            raise FinalizeError("closing gzip stream failed", exc) from exc

    def abort(self) -> None:
        """Best-effort close of all layers without any validity guarantee.

        Errors are logged at debug level and otherwise ignored.
        """
        if self.closed:
            return
        self.closed = True
        for layer in (self._text, self._gzip):
            if layer is None:
                continue
            try:
                layer.close()
            except (OSError, ValueError) as exc:
                logger.debug("RecordSink: ignoring error during abort: %s", exc)

    def __enter__(self) -> "RecordSink":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()
        elif not self.closed:
            self.finalize()


def iter_artifact_rows(path: str | Path) -> Iterator[List[str]]:
    """Yield the decoded CSV rows of an artifact, header row first.

    Args:
        path: Path to a gzip-compressed CSV export.

    Raises:
        OSError: If the file is missing or not a valid gzip stream.
        EOFError: If the gzip stream is truncated.
    """
    with gzip.open(path, "rt", encoding="utf-8", newline="") as f:
        yield from csv.reader(f)
