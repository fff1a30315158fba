"""Shared pytest fixtures for HitExport tests.

Conventions:
- Hits are built in code with make_hit()/make_hits(); no fixture files needed
- Sources are in-memory (ListHitSource or ScriptedSource); no real HTTP calls
- Every artifact is written under pytest's tmp_path
- Pacing is disabled so tests never sleep
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import pytest

from config.settings import ExportConfig
from hitexport.errors import FetchError
from hitexport.models.export import ExportSuccess
from hitexport.models.hits import Hit, HitPage, Tenant
from hitexport.notifiers.base import BaseNotifier
from hitexport.sources.base import BaseHitSource, ListHitSource

_EPOCH = datetime(2020, 6, 18, 14, 42, 0, tzinfo=timezone.utc)


def make_hit(hit_id: int, **overrides) -> Hit:
    """Build a Hit with deterministic field values derived from its id."""
    fields = dict(
        id=hit_id,
        path=f"/page/{hit_id % 17}",
        title=f"Page {hit_id % 17}",
        event=hit_id % 5 == 0,
        bot=0 if hit_id % 11 else 3,
        session=1000 + hit_id // 4,
        ref="https://news.example.com/" if hit_id % 3 == 0 else "",
        browser="Firefox/77.0",
        size=None if hit_id % 7 == 0 else (1920, 1080, 1),
        location="NL" if hit_id % 2 else "US-CA",
        created_at=_EPOCH + timedelta(minutes=hit_id),
    )
    fields.update(overrides)
    return Hit(**fields)


def make_hits(count: int, start: int = 1, step: int = 1) -> List[Hit]:
    """Build ``count`` hits with ids start, start+step, ..."""
    return [make_hit(start + i * step) for i in range(count)]


class ScriptedSource(BaseHitSource):
    """List-backed source that records every call and can fail on demand.

    Args:
        hits: Hits to serve, in id order.
        fail_on_call: 1-based fetch number that raises instead of returning.
        error: Exception raised on the failing call.
    """

    name = "ScriptedSource"

    def __init__(
        self,
        hits: List[Hit],
        fail_on_call: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self._inner = ListHitSource(hits)
        self.fail_on_call = fail_on_call
        self.error = error or FetchError("source unavailable")
        self.calls: List[Dict[str, int]] = []
        self.closed = False
        self.on_fetch: Optional[Callable[[int], None]] = None

    def fetch_page(self, cursor: int, limit: int) -> HitPage:
        self.calls.append({"cursor": cursor, "limit": limit})
        if self.on_fetch is not None:
            self.on_fetch(len(self.calls))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.error
        return self._inner.fetch_page(cursor, limit)

    def close(self) -> None:
        self.closed = True


class RecordingNotifier(BaseNotifier):
    """Notifier that remembers every notice, optionally failing."""

    name = "RecordingNotifier"

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.notices: List[tuple] = []
        self.error = error

    def notify(self, tenant: Tenant, outcome: ExportSuccess) -> None:
        self.notices.append((tenant, outcome))
        if self.error is not None:
            raise self.error


@pytest.fixture
def tenant() -> Tenant:
    return Tenant(id=1, code="example", contact="owner@example.com")


@pytest.fixture
def export_dir(tmp_path):
    path = tmp_path / "exports"
    path.mkdir()
    return path


@pytest.fixture
def export_config(export_dir) -> ExportConfig:
    """ExportConfig writing under tmp_path, no pacing, small pages."""
    return ExportConfig(page_size=100, pacing_delay=0.0, export_dir=str(export_dir))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sample_hits() -> List[Hit]:
    """250 hits with ids 1..250."""
    return make_hits(250)


@pytest.fixture
def hit_factory() -> Callable[..., Hit]:
    return make_hit


@pytest.fixture
def hits_factory() -> Callable[..., List[Hit]]:
    return make_hits


@pytest.fixture
def source_factory():
    return ScriptedSource


@pytest.fixture
def notifier_factory():
    return RecordingNotifier
