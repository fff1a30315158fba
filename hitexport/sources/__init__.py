"""HitExport sources package.

Paginated hit sources only — no export logic in this layer.
Each source handles its own connections, retries, and row parsing.
"""

from hitexport.sources.base import BaseHitSource, ListHitSource
from hitexport.sources.http_source import HTTPHitSource
from hitexport.sources.sqlite_source import SQLiteHitSource

__all__ = [
    "BaseHitSource",
    "ListHitSource",
    "HTTPHitSource",
    "SQLiteHitSource",
]
