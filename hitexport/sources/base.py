"""BaseHitSource ABC — the page-fetch contract consumed by the export pipeline.

A source returns hits strictly after a cursor, in ascending id order, at most
``limit`` at a time. An empty page with no exception means the stream is
exhausted. Any retry policy belongs to the source, never to the pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List

from hitexport.models.hits import Hit, HitPage


class BaseHitSource(ABC):
    """Abstract base class for all paginated hit sources.

    Sources may hold connections or sessions; release them with close() or by
    using the source as a context manager.
    """

    name: str = "BaseHitSource"

    @abstractmethod
    def fetch_page(self, cursor: int, limit: int) -> HitPage:
        """Fetch the next page of hits with id greater than ``cursor``.

        Args:
            cursor: Highest hit id already exported (0 for a full export).
            limit: Maximum number of hits to return.

        Returns:
            HitPage whose cursor is the highest id it contains, or ``cursor``
            when it is empty.

        Raises:
            FetchError: If the page cannot be retrieved.
        """

    def close(self) -> None:
        """Release connections or sessions held by the source."""

    def __enter__(self) -> "BaseHitSource":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class ListHitSource(BaseHitSource):
    """In-memory source over a pre-built list of hits.

    Useful for replaying fixtures and for backfills that are already loaded.
    Hits are sorted by id once at construction.
    """

    name = "ListHitSource"

    def __init__(self, hits: List[Hit]) -> None:
        self._hits = sorted(hits, key=lambda h: h.id)

    def fetch_page(self, cursor: int, limit: int) -> HitPage:
        page = [h for h in self._hits if h.id > cursor][:limit]
        return HitPage.from_hits(page, cursor)
