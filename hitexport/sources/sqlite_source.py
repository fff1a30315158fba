"""SQLite hit source for HitExport.

Reads hits straight from a ``hits`` table using keyset pagination on ``id``.
Expected columns: id, path, title, event, bot, session, ref, browser, size,
location, created_at (and optionally site_id). ``size`` is stored as a
comma-joined string; ``created_at`` as ISO 8601 text.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from typing import Optional

from config.defaults import SQLITE_HITS_TABLE
from hitexport.errors import FetchError
from hitexport.models.hits import Hit, HitPage
from hitexport.sources.base import BaseHitSource

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COLUMNS = "id, path, title, event, bot, session, ref, browser, size, location, created_at"


class SQLiteHitSource(BaseHitSource):
    """Paginated hit source backed by a SQLite database.

    Args:
        db_path: Path to the SQLite database file.
        table: Table holding the hits.
        site_id: Restrict the export to one site when the table holds several.
    """

    name = "SQLiteHitSource"

    def __init__(
        self,
        db_path: str,
        table: str = SQLITE_HITS_TABLE,
        site_id: Optional[int] = None,
    ) -> None:
        if not _IDENT_RE.match(table):
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = db_path
        self.table = table
        self.site_id = site_id
        self._conn: Optional[sqlite3.Connection] = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def fetch_page(self, cursor: int, limit: int) -> HitPage:
        """Fetch up to ``limit`` hits with id greater than ``cursor``.

        Raises:
            FetchError: On any database error or malformed row.
        """
        query = f"SELECT {_COLUMNS} FROM {self.table} WHERE id > ?"  # noqa: S608 (identifier validated in __init__)
        params: list = [cursor]
        if self.site_id is not None:
            query += " AND site_id = ?"
            params.append(self.site_id)
        query += " ORDER BY id ASC LIMIT ?"
        params.append(limit)

        try:
            rows = self._connect().execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise FetchError(f"query on {self.db_path}:{self.table} failed", exc) from exc

        try:
            hits = [Hit.from_dict(dict(row)) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"malformed row in {self.table}", exc) from exc

        logger.debug("SQLite source: %d hits after cursor %d", len(hits), cursor)
        return HitPage.from_hits(hits, cursor)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
