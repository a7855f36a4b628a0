"""Authenticated GET for the spreadsheets feeds.

Wraps an httpx client, attaches a bearer token when a token provider is
configured, and checks that the response is what the caller asked for: an
Atom feed or a CSV export.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from sheetfeed.config import feed_retries, feed_timeout
from sheetfeed.sheets.exceptions import FeedAccessError, SheetsAPIError

logger = logging.getLogger(__name__)

NS = {
    "feed": "http://www.w3.org/2005/Atom",
    "gs": "http://schemas.google.com/spreadsheets/2006",
    "gsx": "http://schemas.google.com/spreadsheets/2006/extended",
    "openSearch": "http://a9.com/-/spec/opensearchrss/1.0/",
}

EXPECTED_CONTENT_TYPES = {
    "feed": ("application/atom+xml",),
    "csv": ("text/csv",),
}


class TokenProvider(Protocol):
    def get_access_token(self) -> str: ...


@dataclass
class FeedResponse:
    """Status, content type and body of one feed request."""

    status_code: int
    content_type: str
    content: bytes
    url: str

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    def xml(self) -> ET.Element:
        """Parse the body as an XML document and return its root."""
        try:
            return ET.fromstring(self.content)
        except ET.ParseError as e:
            raise SheetsAPIError(
                f"Malformed feed from {self.url}: {e}", status_code=self.status_code
            ) from e


class FeedTransport:
    """Synchronous feed GETs over httpx.

    Example:
        >>> transport = FeedTransport(auth=GoogleOAuth())
        >>> response = transport.get(ws.cellsfeed, params={"max-row": 4})
        >>> root = response.xml()
    """

    def __init__(
        self,
        auth: TokenProvider | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        retries: int | None = None,
    ):
        """Initialize the transport.

        Args:
            auth: Object with get_access_token(); None for published sheets.
            client: Preconfigured httpx client (tests pass one with a MockTransport).
            timeout: Request timeout in seconds. Defaults to SHEETFEED_TIMEOUT.
            retries: Connection retries. Defaults to SHEETFEED_RETRIES.
        """
        self.auth = auth
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(
                timeout=timeout if timeout is not None else feed_timeout(),
                transport=httpx.HTTPTransport(
                    retries=retries if retries is not None else feed_retries()
                ),
                follow_redirects=True,
            )
        self._client = client

    @property
    def is_authenticated(self) -> bool:
        return self.auth is not None

    def _get_headers(self) -> dict[str, str]:
        headers = {"GData-Version": "3.0"}
        if self.auth is not None:
            headers["Authorization"] = f"Bearer {self.auth.get_access_token()}"
        return headers

    def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        expect: str = "feed",
    ) -> FeedResponse:
        """GET ``url`` and check the response.

        Args:
            url: Feed endpoint.
            params: Query parameters; omitted entirely when None or empty.
            expect: "feed" for Atom XML or "csv" for a CSV export.

        Raises:
            SheetsAPIError: If the request fails or returns an error status.
            FeedAccessError: On 401/403, or when the content type is wrong.
        """
        what = "csv" if expect == "csv" else "the feed"
        logger.debug(f"GET {url} params={params}")

        try:
            response = self._client.get(url, params=params or None, headers=self._get_headers())
        except httpx.HTTPError as e:
            raise SheetsAPIError(f"Request failed: {e}") from e

        content_type = response.headers.get("content-type", "")

        if response.status_code in (401, 403):
            raise FeedAccessError(what, response.status_code, content_type)
        if response.status_code >= 400:
            raise SheetsAPIError(
                f"API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        if not content_type.startswith(EXPECTED_CONTENT_TYPES[expect]):
            raise FeedAccessError(what, response.status_code, content_type)

        return FeedResponse(
            status_code=response.status_code,
            content_type=content_type,
            content=response.content,
            url=str(response.url),
        )

    def close(self):
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
