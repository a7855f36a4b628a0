"""Read Google Sheets through the cell, list and CSV feeds.

Cells come back from the cell feed as a sparse bag of records; ``reshape``
turns them into a dense table and ``simplify`` into a named vector.

Usage:
    from sheetfeed.sheets import SheetsClient, reshape, simplify

    client = SheetsClient(auth=GoogleOAuth())
    ws = client.register("<spreadsheet key>").worksheet("Oceania")

    table = reshape(client.get_cells(ws, "A1:F5"))
    header = simplify(client.get_row(ws, 1))

OAuth Setup:
    1. Download OAuth credentials from Google Cloud Console
    2. Import: sheetfeed google import ~/Downloads/credentials.json
    3. Authorize: sheetfeed google login
"""

from __future__ import annotations

from sheetfeed.sheets.cell_range import parse_range
from sheetfeed.sheets.cellfeed import get_cells, get_col, get_row, get_via_cf
from sheetfeed.sheets.client import SheetsClient
from sheetfeed.sheets.exceptions import (
    CellRangeError,
    FeedAccessError,
    LimitsError,
    SheetsAPIError,
    SheetsError,
    UnsupportedSheetError,
    WorksheetNotFoundError,
)
from sheetfeed.sheets.limits import validate_limits
from sheetfeed.sheets.listfeed import get_via_csv, get_via_lf
from sheetfeed.sheets.models import (
    CellFeed,
    CellRecord,
    NamedVector,
    NoData,
    RangeLimits,
    Spreadsheet,
    Table,
    WorksheetExtent,
    WorksheetRef,
)
from sheetfeed.sheets.registration import register
from sheetfeed.sheets.reshape import reshape
from sheetfeed.sheets.simplify import simplify
from sheetfeed.sheets.transport import FeedTransport

__all__ = [
    "SheetsClient",
    "FeedTransport",
    "register",
    "get_via_cf",
    "get_row",
    "get_col",
    "get_cells",
    "get_via_lf",
    "get_via_csv",
    "reshape",
    "simplify",
    "validate_limits",
    "parse_range",
    "CellFeed",
    "CellRecord",
    "NamedVector",
    "NoData",
    "RangeLimits",
    "Spreadsheet",
    "Table",
    "WorksheetExtent",
    "WorksheetRef",
    "SheetsError",
    "SheetsAPIError",
    "FeedAccessError",
    "LimitsError",
    "CellRangeError",
    "UnsupportedSheetError",
    "WorksheetNotFoundError",
]
