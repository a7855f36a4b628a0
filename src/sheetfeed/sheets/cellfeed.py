"""Cell feed consumption: query building, fetching and entry parsing."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping
from typing import Any

from sheetfeed.sheets.cell_range import parse_range
from sheetfeed.sheets.exceptions import LimitsError, SheetsAPIError, UnsupportedSheetError
from sheetfeed.sheets.limits import validate_limits
from sheetfeed.sheets.models import CellFeed, CellRecord, RangeLimits, WorksheetRef
from sheetfeed.sheets.transport import NS, FeedTransport

logger = logging.getLogger(__name__)

# Size of the grid the feed scans when asked for empty cells without limits
DEFAULT_FEED_ROWS = 1000
DEFAULT_FEED_COLS = 26


def build_cell_query(limits: RangeLimits, return_empty: bool = False) -> dict[str, Any] | None:
    """Query parameters for the cell feed, or None when there are none to send."""
    query: dict[str, Any] = dict(limits.to_query())
    if return_empty:
        # return-empty is undocumented in the current API but still honoured
        query["return-empty"] = "true"
        if limits.is_unbounded:
            logger.warning(
                "Requesting empty cells without limits; the feed will scan every cell "
                f"of the default {DEFAULT_FEED_ROWS} x {DEFAULT_FEED_COLS} grid, "
                "which can take minutes"
            )
    return query or None


def _parse_entry(entry: ET.Element) -> CellRecord:
    cell = entry.find("gs:cell", NS)
    if cell is None:
        raise SheetsAPIError("Cell feed entry has no gs:cell element")

    cell_id = entry.findtext("feed:id", default="", namespaces=NS).strip()
    edit = entry.find("feed:link[@rel='edit']", NS)

    return CellRecord(
        position_a1=entry.findtext("feed:title", default="", namespaces=NS),
        position_rc=cell_id.rsplit("/", 1)[-1],
        row=int(cell.get("row")),
        col=int(cell.get("col")),
        text=cell.text or "",
        edit_link=edit.get("href") if edit is not None else None,
        cell_id=cell_id or None,
    )


def parse_cell_feed(
    root: ET.Element, ws_title: str | None = None, return_links: bool = False
) -> CellFeed:
    """Turn a cell feed document into a CellFeed.

    Args:
        root: Root element of the Atom feed.
        ws_title: Title of the worksheet the feed belongs to.
        return_links: Keep each record's edit link and cell id.
    """
    entries = root.findall("feed:entry", NS)
    if not entries:
        logger.info(f'No cells found in worksheet "{ws_title}" for the requested range')
        return CellFeed(records=(), ws_title=ws_title, include_links=return_links)

    records = [_parse_entry(entry) for entry in entries]

    read_only = all(rec.edit_link is None for rec in records)
    if read_only:
        logger.info(f'Worksheet "{ws_title}" is read-only for these credentials')

    if not return_links:
        records = [rec.without_links() for rec in records]

    return CellFeed(
        records=tuple(records),
        ws_title=ws_title,
        read_only=read_only,
        include_links=return_links,
    )


def get_via_cf(
    transport: FeedTransport,
    ws: WorksheetRef,
    min_row: Any = None,
    max_row: Any = None,
    min_col: Any = None,
    max_col: Any = None,
    limits: RangeLimits | Mapping[str, Any] | None = None,
    return_empty: bool = False,
    return_links: bool = False,
) -> CellFeed:
    """Get the cells of a rectangular region of a worksheet, one record per cell.

    Any subset of the limits may be given; they are validated against each
    other and against the worksheet extent before any request is made. Empty
    cells are left out unless ``return_empty`` is set.

    Args:
        transport: Authenticated GET.
        ws: Worksheet to read.
        min_row: Positive integer, optional.
        max_row: Positive integer, optional.
        min_col: Positive integer, optional.
        max_col: Positive integer, optional.
        limits: All four bounds at once; mutually exclusive with the above.
        return_empty: Ask the feed for empty cells too.
        return_links: Keep edit links and cell ids on the records.

    Returns:
        CellFeed, empty but fully typed when no cells fall in the region.

    Raises:
        LimitsError: If the limits are invalid.
        UnsupportedSheetError: If the worksheet has no cell feed.
        FeedAccessError: If the sheet cannot be read with these credentials.
    """
    if limits is None:
        limits = {"min_row": min_row, "max_row": max_row, "min_col": min_col, "max_col": max_col}
    elif any(bound is not None for bound in (min_row, max_row, min_col, max_col)):
        raise LimitsError("Pass either limits or individual row/column bounds, not both")

    limits = validate_limits(limits, ws.row_extent, ws.col_extent)

    if ws.cellsfeed is None:
        raise UnsupportedSheetError(f'Worksheet "{ws.title}" does not expose a cell feed.')

    query = build_cell_query(limits, return_empty)
    response = transport.get(ws.cellsfeed, params=query)
    return parse_cell_feed(response.xml(), ws_title=ws.title, return_links=return_links)


def _span(values: int | Iterable[int]) -> tuple[Any, Any]:
    if isinstance(values, Iterable) and not isinstance(values, str):
        values = list(values)
        if not values:
            raise LimitsError("At least one row or column number is required")
        return min(values), max(values)
    return values, values


def get_row(transport: FeedTransport, ws: WorksheetRef, row: int | Iterable[int]) -> CellFeed:
    """Cells of one row, or of the contiguous rows from min(row) to max(row)."""
    min_row, max_row = _span(row)
    return get_via_cf(transport, ws, min_row=min_row, max_row=max_row)


def get_col(transport: FeedTransport, ws: WorksheetRef, col: int | Iterable[int]) -> CellFeed:
    """Cells of one column, or of the contiguous columns from min(col) to max(col)."""
    min_col, max_col = _span(col)
    return get_via_cf(transport, ws, min_col=min_col, max_col=max_col)


def get_cells(transport: FeedTransport, ws: WorksheetRef, cell_range: str) -> CellFeed:
    """Cells of a range such as "B2:D4" or "R2C2:R4C4"."""
    return get_via_cf(transport, ws, limits=parse_range(cell_range))
