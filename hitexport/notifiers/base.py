"""Completion notifiers for HitExport.

A notifier is told about an export only after its artifact has been fully
written, published, and hashed. Notifiers raise NotifyError on delivery
failure; the pipeline logs it and keeps the published artifact.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from hitexport.models.export import ExportSuccess
from hitexport.models.hits import Tenant

logger = logging.getLogger(__name__)


def build_payload(tenant: Tenant, outcome: ExportSuccess) -> Dict[str, Any]:
    """Build the notification payload for a successful export."""
    return {
        "tenant_id": tenant.id,
        "tenant_code": tenant.code,
        "contact": tenant.contact,
        "cursor": outcome.cursor,
        "size": outcome.size,
        "rows": outcome.rows,
        "digest": outcome.digest,
        "path": outcome.path,
    }


class BaseNotifier(ABC):
    """Abstract base class for completion notifiers."""

    name: str = "BaseNotifier"

    @abstractmethod
    def notify(self, tenant: Tenant, outcome: ExportSuccess) -> None:
        """Announce a completed export.

        Raises:
            NotifyError: If the notice could not be delivered.
        """


class LogNotifier(BaseNotifier):
    """Notifier that writes the export summary to the log."""

    name = "LogNotifier"

    def notify(self, tenant: Tenant, outcome: ExportSuccess) -> None:
        logger.info(
            "Export ready for %s: %s (%d rows, %s MiB, sha256=%s, last id %d)",
            tenant.code,
            outcome.path,
            outcome.rows,
            outcome.size,
            outcome.digest,
            outcome.cursor,
        )
