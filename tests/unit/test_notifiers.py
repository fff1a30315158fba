"""Unit tests for hitexport.notifiers.

Covers:
- build_payload: every field of the notification payload
- LogNotifier: summary line logged
- WebhookNotifier: JSON POST, non-2xx and transport errors raise NotifyError
"""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest
import requests

from hitexport.errors import NotifyError
from hitexport.models.export import ExportSuccess
from hitexport.notifiers import LogNotifier, WebhookNotifier, build_payload


@pytest.fixture
def success(tenant) -> ExportSuccess:
    return ExportSuccess(
        tenant=tenant,
        path="/tmp/export-example.csv.gz",
        rows=12000,
        size="0.4",
        size_bytes=420_000,
        digest="ab" * 32,
        cursor=12000,
    )


class TestBuildPayload:
    def test_fields(self, tenant, success):
        assert build_payload(tenant, success) == {
            "tenant_id": 1,
            "tenant_code": "example",
            "contact": "owner@example.com",
            "cursor": 12000,
            "size": "0.4",
            "rows": 12000,
            "digest": "ab" * 32,
            "path": "/tmp/export-example.csv.gz",
        }


class TestLogNotifier:
    def test_logs_summary(self, tenant, success, caplog):
        with caplog.at_level(logging.INFO, logger="hitexport.notifiers.base"):
            LogNotifier().notify(tenant, success)

        assert "Export ready for example" in caplog.text
        assert "12000 rows" in caplog.text


class TestWebhookNotifier:
    def test_posts_json_payload(self, tenant, success):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=204)

        WebhookNotifier("https://hooks.example.com/done", timeout=5, session=session).notify(
            tenant, success
        )

        session.post.assert_called_once_with(
            "https://hooks.example.com/done",
            json=build_payload(tenant, success),
            timeout=5,
        )

    def test_non_2xx_raises(self, tenant, success):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=500)

        with pytest.raises(NotifyError, match="500"):
            WebhookNotifier("https://hooks.example.com/done", session=session).notify(
                tenant, success
            )

    def test_transport_error_raises(self, tenant, success):
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(NotifyError):
            WebhookNotifier("https://hooks.example.com/done", session=session).notify(
                tenant, success
            )
