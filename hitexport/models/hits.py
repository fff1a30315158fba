"""Hit and page data models for HitExport.

A Hit is one exported analytics row. Hits are immutable once fetched and are
ordered by their source-assigned id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from dateutil import parser as dateutil_parser

Number = Union[int, float]


def _parse_size(raw: Any) -> Optional[Tuple[Number, ...]]:
    """Normalize a screen size value to a tuple of numbers, or None when absent."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        parts = [p.strip() for p in raw.split(",") if p.strip()]
        values: List[Number] = []
        for part in parts:
            num = float(part)
            values.append(int(num) if num.is_integer() else num)
        return tuple(values) or None
    return tuple(raw) or None


def _parse_bool(raw: Any) -> bool:
    """Accept JSON booleans, 0/1 integers, and "true"/"false" strings."""
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "1", "t", "yes")
    return bool(raw)


def _parse_timestamp(raw: Any) -> datetime:
    """Parse an ISO 8601 string or datetime; naive values are taken as UTC."""
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, (int, float)):
        value = datetime.fromtimestamp(raw, tz=timezone.utc)
    else:
        value = dateutil_parser.isoparse(str(raw))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class Hit:
    """A single pageview or event recorded for a site."""

    id: int
    path: str
    created_at: datetime
    title: str = ""
    event: bool = False
    bot: int = 0
    session: int = 0
    ref: str = ""
    browser: str = ""
    size: Optional[Sequence[Number]] = None   # screen width, height[, scale]
    location: str = ""                        # ISO 3166 code, e.g. "NL" or "US-CA"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Hit":
        """Build a Hit from a JSON object or database row mapping.

        Accepts "created_at" or "date" for the timestamp, "ref" or "referrer"
        for the referrer, and a list or comma-joined string for "size".

        Raises:
            KeyError: If "id", "path", or the timestamp is missing.
            ValueError: If a field cannot be converted.
        """
        created = raw.get("created_at", raw.get("date"))
        if created is None:
            raise KeyError("created_at")
        return cls(
            id=int(raw["id"]),
            path=str(raw["path"] or ""),
            created_at=_parse_timestamp(created),
            title=raw.get("title") or "",
            event=_parse_bool(raw.get("event", False)),
            bot=int(raw.get("bot") or 0),
            session=int(raw.get("session") or 0),
            ref=raw.get("ref", raw.get("referrer")) or "",
            browser=raw.get("browser") or "",
            size=_parse_size(raw.get("size")),
            location=raw.get("location") or "",
        )


@dataclass
class HitPage:
    """One bounded batch of hits returned by a single fetch.

    ``cursor`` is the highest hit id in ``hits``, or the request cursor when
    the page is empty.
    """

    hits: List[Hit] = field(default_factory=list)
    cursor: int = 0

    @classmethod
    def from_hits(cls, hits: List[Hit], request_cursor: int) -> "HitPage":
        """Build a page and derive its cursor from the hits it carries."""
        if not hits:
            return cls(hits=[], cursor=request_cursor)
        return cls(hits=hits, cursor=max(h.id for h in hits))

    @property
    def exhausted(self) -> bool:
        """True when the page is empty, i.e. the stream has no more hits."""
        return not self.hits

    def __len__(self) -> int:
        return len(self.hits)


@dataclass(frozen=True)
class Tenant:
    """The site an export is produced for."""

    id: int
    code: str
    contact: Optional[str] = None   # address the completion notice is meant for
