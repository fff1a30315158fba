"""HTTP JSON hit source for HitExport.

Fetches hits from a REST endpoint that pages by id:

    GET <base_url>?after=<cursor>&limit=<n>
    Authorization: Bearer <token>            (optional)

    200 {"hits": [{"id": 1, "path": "/", "created_at": "2020-06-18T14:42:00Z", ...}]}

Handles request construction, exponential backoff retry on transient failures,
and response parsing. Retries live here, not in the pipeline: by the time a
FetchError leaves this client the source has given up.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from config.defaults import HTTP_BACKOFF_BASE, HTTP_MAX_RETRIES, HTTP_REQUEST_TIMEOUT
from hitexport.errors import FetchError
from hitexport.models.hits import Hit, HitPage
from hitexport.sources.base import BaseHitSource

logger = logging.getLogger(__name__)

_RETRY_STATUS = (429, 500, 502, 503, 504)


class HTTPHitSource(BaseHitSource):
    """Paginated hit source backed by an HTTP JSON API.

    Args:
        base_url: Endpoint URL returning a page of hits.
        api_token: Optional Bearer token.
        max_retries: Maximum retry attempts on transient HTTP errors.
        backoff_base: Base seconds for exponential backoff (doubles per attempt).
        request_timeout: HTTP request timeout in seconds.
        session: Optional pre-configured requests Session.
    """

    name = "HTTPHitSource"

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        max_retries: int = HTTP_MAX_RETRIES,
        backoff_base: float = HTTP_BACKOFF_BASE,
        request_timeout: int = HTTP_REQUEST_TIMEOUT,
        session: Optional[Session] = None,
    ) -> None:
        self.base_url = base_url
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.request_timeout = request_timeout

        if session is None:
            session = Session()
            adapter = HTTPAdapter(max_retries=0)   # We handle retries manually
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session
        self._session.headers.update({"Accept": "application/json"})
        if api_token:
            self._session.headers.update({"Authorization": f"Bearer {api_token}"})

    def _build_url(self, cursor: int, limit: int) -> str:
        sep = "&" if "?" in self.base_url else "?"
        return f"{self.base_url}{sep}{urlencode({'after': cursor, 'limit': limit})}"

    def _get_with_retry(self, url: str) -> requests.Response:
        """Execute an HTTP GET with exponential backoff retry.

        Args:
            url: URL to fetch.

        Returns:
            The successful (200) response.

        Raises:
            FetchError: On a non-retryable status, a permanent request error,
                or exhausted retries.
        """
        last_error: Optional[BaseException] = None
        for attempt in range(self.max_retries + 1):
            if attempt:
                wait = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    "Hit source: retrying in %.1fs (attempt %d/%d)",
                    wait,
                    attempt,
                    self.max_retries,
                )
                time.sleep(wait)
            try:
                resp = self._session.get(url, timeout=self.request_timeout)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as exc:
                logger.warning("Hit source: transient request error: %s", exc)
                last_error = exc
                continue
            except requests.exceptions.RequestException as exc:
                raise FetchError(f"request to {url} failed", exc) from exc

            if resp.status_code in _RETRY_STATUS:
                logger.warning("Hit source: HTTP %d for %s", resp.status_code, url)
                last_error = FetchError(f"HTTP {resp.status_code}")
                continue
            if resp.status_code != 200:
                raise FetchError(f"HTTP {resp.status_code} for {url}")
            return resp

        raise FetchError(f"exhausted {self.max_retries} retries for {url}", last_error)

    def fetch_page(self, cursor: int, limit: int) -> HitPage:
        """Fetch up to ``limit`` hits with id greater than ``cursor``.

        Raises:
            FetchError: On HTTP failure or an unparseable response body.
        """
        url = self._build_url(cursor, limit)
        resp = self._get_with_retry(url)

        try:
            body = resp.json()
        except ValueError as exc:
            raise FetchError(f"unparseable response body from {url}", exc) from exc

        raw_hits = _extract_hits(body)
        if raw_hits is None:
            raise FetchError(f"response from {url} has no 'hits' list")

        try:
            hits: List[Hit] = [Hit.from_dict(raw) for raw in raw_hits]
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"malformed hit in response from {url}", exc) from exc

        logger.debug("Hit source: %d hits after cursor %d", len(hits), cursor)
        return HitPage.from_hits(hits, cursor)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()


def _extract_hits(body: Any) -> Optional[List[Dict[str, Any]]]:
    """Return the hit list from a response body, accepting a bare list too."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get("hits"), list):
        return body["hits"]
    return None
