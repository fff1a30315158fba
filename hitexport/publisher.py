"""ArtifactPublisher — promote a finished temp file to its per-tenant path.

Publishing is a single os.replace(), so a reader of the artifact path sees
either the previous export or the new one in full. The SHA-256 digest is
computed from the published file, after the rename.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from config.defaults import EXPORT_FILENAME_TEMPLATE
from hitexport.errors import DigestError, PublishError
from hitexport.io.persistence import atomic_replace, export_path, file_checksum
from hitexport.models.hits import Tenant

logger = logging.getLogger(__name__)


class ArtifactPublisher:
    """Atomically publish export artifacts and compute their digests.

    Args:
        export_dir: Directory holding published artifacts (default: system temp dir).
        filename_template: File name template with a ``{code}`` placeholder.
    """

    def __init__(
        self,
        export_dir: Optional[str | Path] = None,
        filename_template: str = EXPORT_FILENAME_TEMPLATE,
    ) -> None:
        self.export_dir = export_dir
        self.filename_template = filename_template

    def path_for(self, tenant: Tenant) -> Path:
        """Return the deterministic artifact path for ``tenant``."""
        return export_path(tenant.code, self.export_dir, self.filename_template)

    def publish(self, temp_path: str | Path, tenant: Tenant) -> Tuple[Path, str]:
        """Move ``temp_path`` to the tenant's artifact path and hash it.

        Args:
            temp_path: Fully written, synced, and closed temporary artifact.
            tenant: Tenant owning the artifact.

        Returns:
            Tuple of (published path, SHA-256 hex digest).

        Raises:
            PublishError: If the rename fails; the temp file has been removed.
            DigestError: If the published file cannot be hashed.
        """
        final = self.path_for(tenant)
        try:
            final.parent.mkdir(parents=True, exist_ok=True)
            atomic_replace(temp_path, final)
        except OSError as exc:
            raise PublishError(f"could not publish {temp_path} to {final}", exc) from exc

        try:
            digest = file_checksum(final)
        except OSError as exc:
            raise DigestError(f"could not hash published artifact {final}", exc) from exc

        logger.info("Published %s (sha256=%s)", final, digest)
        return final, digest

    def verify(self, path: str | Path, digest: str) -> bool:
        """Return True if the file at ``path`` matches ``digest``."""
        try:
            return file_checksum(path) == digest
        except OSError as exc:
            logger.warning("Verification of %s failed: %s", path, exc)
            return False
