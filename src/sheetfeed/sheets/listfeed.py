"""Bulk consumption of rectangular worksheets via the list feed or CSV export.

Both paths assume the populated cells form a neat rectangle with a header
row, and both return the same Table contract as ``reshape``.
"""

from __future__ import annotations

import csv
import io
import logging

from sheetfeed.sheets.convert import convert_column
from sheetfeed.sheets.exceptions import UnsupportedSheetError
from sheetfeed.sheets.models import Table, WorksheetRef
from sheetfeed.sheets.transport import NS, FeedTransport

logger = logging.getLogger(__name__)

NA_STRINGS = ("NA", "")

OLD_SHEET_MESSAGE = (
    'This appears to be an "old" Google Sheet. The old Sheets do not offer the '
    "API access required by this function. Consider converting it from an old "
    "Sheet to a new Sheet. Or use another data consumption function, such as "
    "get_via_lf() or get_via_cf()."
)

_GSX = "{" + NS["gsx"] + "}"


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[-1]


def _table_from_rows(names: list[str], rows: list[list[str | None]]) -> Table:
    table = Table.from_rows(names, rows)
    return Table(
        names=table.names,
        columns=[convert_column(col, NA_STRINGS) for col in table.columns],
    )


def get_via_lf(transport: FeedTransport, ws: WorksheetRef) -> Table:
    """Get a rectangular worksheet via the list feed.

    The first row is the header. The service mangles the names: lowercased,
    with non-alphanumeric characters removed ("Time 2 Eat!" becomes
    "time2eat"). Use ``get_via_csv`` or the cell feed to keep them intact.

    Raises:
        UnsupportedSheetError: If the worksheet has no list feed.
        FeedAccessError: If the sheet cannot be read with these credentials.
    """
    if ws.listfeed is None:
        raise UnsupportedSheetError(f'Worksheet "{ws.title}" does not expose a list feed.')

    root = transport.get(ws.listfeed).xml()
    entries = root.findall("feed:entry", NS)
    if not entries:
        logger.info(f'Worksheet "{ws.title}" is empty.')
        return Table()

    names = [_local_name(el.tag) for el in entries[0] if el.tag.startswith(_GSX)]

    rows = []
    for entry in entries:
        values = {_local_name(el.tag): el.text or "" for el in entry if el.tag.startswith(_GSX)}
        rows.append([values.get(name, "") for name in names])

    return _table_from_rows(names, rows)


def get_via_csv(transport: FeedTransport, ws: WorksheetRef) -> Table:
    """Get every cell in the data rectangle via the worksheet's CSV export.

    Much faster than the list feed, and the header row is not mangled. Empty
    cells come back as None.

    Raises:
        UnsupportedSheetError: If the worksheet is an old sheet without an export link.
        FeedAccessError: If the sheet cannot be read, or is not published.
    """
    if ws.exportcsv is None:
        raise UnsupportedSheetError(OLD_SHEET_MESSAGE)

    response = transport.get(ws.exportcsv, expect="csv")
    if response.is_empty:
        logger.info(f'Worksheet "{ws.title}" is empty.')
        return Table()

    reader = csv.reader(io.StringIO(response.text.lstrip("\ufeff")))
    rows = [row for row in reader if row]
    if not rows:
        logger.info(f'Worksheet "{ws.title}" is empty.')
        return Table()

    names, body = rows[0], rows[1:]
    width = len(names)
    body = [(row + [""] * width)[:width] for row in body]
    return _table_from_rows(names, body)
