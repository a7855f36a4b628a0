"""Spreadsheet registration from the worksheets feed."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime

from sheetfeed.config import feed_base_url
from sheetfeed.sheets.exceptions import SheetsAPIError
from sheetfeed.sheets.models import Spreadsheet, WorksheetExtent, WorksheetRef
from sheetfeed.sheets.transport import NS, FeedTransport

logger = logging.getLogger(__name__)

REL_PREFIX = "http://schemas.google.com/spreadsheets/2006#"
REL_CELLSFEED = REL_PREFIX + "cellsfeed"
REL_LISTFEED = REL_PREFIX + "listfeed"
REL_EXPORTCSV = REL_PREFIX + "exportcsv"

_KEY_IN_URL = re.compile(r"/d/([A-Za-z0-9_-]+)|[?&]key=([A-Za-z0-9_-]+)")


def extract_key(key_or_url: str) -> str:
    """Spreadsheet key from a bare key or a browser URL."""
    if match := _KEY_IN_URL.search(key_or_url):
        return match.group(1) or match.group(2)
    return key_or_url.strip()


def worksheets_feed_url(key: str, visibility: str = "private", base_url: str | None = None) -> str:
    return f"{base_url or feed_base_url()}/worksheets/{key}/{visibility}/full"


def _link(entry: ET.Element, rel: str) -> str | None:
    for link in entry.findall("feed:link", NS):
        if link.get("rel") == rel:
            return link.get("href")
    return None


def _count(entry: ET.Element, tag: str, title: str) -> int:
    text = entry.findtext(tag, namespaces=NS)
    if text is None:
        raise SheetsAPIError(f'Worksheet "{title}" entry has no {tag}')
    return int(text)


def _parse_updated(text: str | None) -> datetime | None:
    if not text:
        return None
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def parse_worksheets_feed(root: ET.Element, key: str) -> Spreadsheet:
    """Build a Spreadsheet from a worksheets feed document."""
    worksheets = []
    for entry in root.findall("feed:entry", NS):
        title = entry.findtext("feed:title", default="", namespaces=NS)
        ws_id = entry.findtext("feed:id", default="", namespaces=NS).rsplit("/", 1)[-1]
        worksheets.append(
            WorksheetRef(
                title=title,
                extent=WorksheetExtent(
                    row_extent=_count(entry, "gs:rowCount", title),
                    col_extent=_count(entry, "gs:colCount", title),
                ),
                cellsfeed=_link(entry, REL_CELLSFEED),
                listfeed=_link(entry, REL_LISTFEED),
                exportcsv=_link(entry, REL_EXPORTCSV),
                ws_id=ws_id or None,
            )
        )

    return Spreadsheet(
        key=key,
        title=root.findtext("feed:title", default="", namespaces=NS),
        worksheets=tuple(worksheets),
        updated=_parse_updated(root.findtext("feed:updated", namespaces=NS)),
        url=_link(root, "alternate"),
    )


def register(
    transport: FeedTransport, key_or_url: str, visibility: str | None = None
) -> Spreadsheet:
    """Register a spreadsheet by key or URL.

    Args:
        transport: Authenticated GET.
        key_or_url: Spreadsheet key, or a URL containing it.
        visibility: "private" or "public"; defaults to private when the
            transport carries credentials.
    """
    key = extract_key(key_or_url)
    if visibility is None:
        visibility = "private" if transport.is_authenticated else "public"

    response = transport.get(worksheets_feed_url(key, visibility))
    spreadsheet = parse_worksheets_feed(response.xml(), key)
    logger.info(
        f'Spreadsheet "{spreadsheet.title}" registered with '
        f"{len(spreadsheet.worksheets)} worksheet(s)"
    )
    return spreadsheet
