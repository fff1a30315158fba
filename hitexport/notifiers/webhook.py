"""Webhook notifier — POSTs the export summary as JSON to a configured URL."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests import Session

from config.defaults import NOTIFY_TIMEOUT
from hitexport.errors import NotifyError
from hitexport.models.export import ExportSuccess
from hitexport.models.hits import Tenant
from hitexport.notifiers.base import BaseNotifier, build_payload

logger = logging.getLogger(__name__)


class WebhookNotifier(BaseNotifier):
    """Deliver completion notices to an HTTP endpoint.

    No retries: a failed delivery is reported once and the artifact stays
    published.

    Args:
        url: Endpoint receiving the JSON payload.
        timeout: Request timeout in seconds.
        session: Optional pre-configured requests Session.
    """

    name = "WebhookNotifier"

    def __init__(
        self,
        url: str,
        timeout: int = NOTIFY_TIMEOUT,
        session: Optional[Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._session = session or Session()

    def notify(self, tenant: Tenant, outcome: ExportSuccess) -> None:
        payload = build_payload(tenant, outcome)
        try:
            resp = self._session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise NotifyError(f"webhook {self.url} unreachable", exc) from exc

        if not 200 <= resp.status_code < 300:
            raise NotifyError(f"webhook {self.url} returned HTTP {resp.status_code}")
        logger.debug("Webhook notified for %s (HTTP %d)", tenant.code, resp.status_code)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
