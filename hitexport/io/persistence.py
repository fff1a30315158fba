"""File persistence utilities for HitExport.

Provides the atomic rename used to publish artifacts, SHA-256 file hashing,
temp-file creation beside the final path, and deterministic artifact paths.
No business logic — file I/O only.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import IO, Optional

from config.defaults import EXPORT_FILENAME_TEMPLATE, HASH_CHUNK_SIZE, TEMP_SUFFIX

logger = logging.getLogger(__name__)

# Tenant codes end up in file names; keep them to a safe character set
_CODE_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def export_path(
    code: str,
    export_dir: Optional[str | Path] = None,
    template: str = EXPORT_FILENAME_TEMPLATE,
) -> Path:
    """Return the deterministic artifact path for a tenant code.

    Args:
        code: Tenant code (e.g. "example").
        export_dir: Directory holding published artifacts (default: system temp dir).
        template: File name template with a ``{code}`` placeholder.

    Returns:
        Path such as ``/tmp/export-example.csv.gz``.

    Raises:
        ValueError: If the code contains path separators or other unsafe characters.
    """
    if not code or not _CODE_RE.match(code) or ".." in code:
        raise ValueError(f"Unsafe tenant code for artifact path: {code!r}")
    base = Path(export_dir) if export_dir is not None else Path(tempfile.gettempdir())
    return base / template.format(code=code)


def create_temp_file(directory: str | Path, prefix: str) -> IO[bytes]:
    """Create a private temporary file in ``directory`` and return its open handle.

    The file lives beside the final artifact so that the publishing rename stays
    on one filesystem. The caller owns the file and must close and remove it.

    Args:
        directory: Directory to create the file in (created if missing).
        prefix: File name prefix.

    Returns:
        Binary file handle opened for writing; ``handle.name`` is its path.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return tempfile.NamedTemporaryFile(
        mode="wb",
        dir=directory,
        prefix=prefix,
        suffix=TEMP_SUFFIX,
        delete=False,
    )


def sync_file(handle: IO[bytes]) -> None:
    """Flush and fsync a file handle so a following stat reports the true size.

    Raises:
        OSError: If flushing or syncing fails.
    """
    handle.flush()
    os.fsync(handle.fileno())


def file_size(handle: IO[bytes]) -> Optional[int]:
    """Return the on-disk size of an open file, or None if it cannot be stat'd."""
    try:
        return os.fstat(handle.fileno()).st_size
    except OSError as exc:
        logger.warning("Could not stat %s: %s", getattr(handle, "name", handle), exc)
        return None


def atomic_replace(src: str | Path, dst: str | Path) -> None:
    """Atomically move ``src`` over ``dst``, replacing any existing file.

    A reader of ``dst`` sees either the previous file or the new one in full.
    On failure ``src`` is removed so no artifact is left in a non-canonical place.

    Raises:
        OSError: If the rename fails.
    """
    try:
        os.replace(src, dst)
    except OSError as exc:
        remove_quietly(src)
        logger.error("Atomic rename failed for %s -> %s: %s", src, dst, exc)
        raise
    logger.debug("Renamed %s -> %s", src, dst)


def remove_quietly(path: str | Path) -> bool:
    """Remove a file if it exists. Returns True if a file was removed.

    Failures are logged and not raised; used on cleanup paths only.
    """
    try:
        os.unlink(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("Could not remove %s: %s", path, exc)
        return False


def file_checksum(path: str | Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute the SHA-256 hex digest of a file.

    Args:
        path: Path to the file.
        chunk_size: Bytes read per iteration.

    Returns:
        SHA-256 hex digest string.

    Raises:
        OSError: If the file is missing or unreadable.
    """
    sha = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            sha.update(chunk)
    return sha.hexdigest()


def human_size(size_bytes: int) -> str:
    """Format a byte count as binary megabytes with one decimal place.

    >>> human_size(1572864)
    '1.5'
    """
    return f"{size_bytes / 1024 / 1024:.1f}"
