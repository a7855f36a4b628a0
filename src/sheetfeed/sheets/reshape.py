"""Reshape cell-level records into a dense rectangular Table.

The cell feed leaves out empty cells, so the records are a sparse bag of
(row, col, text) triples. Reshaping builds the full rectangle spanned by the
records, looks every position up in a (row, col) -> text map, and emits rows
in row order and columns in column order. Positions the feed did not return
become None.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from sheetfeed.sheets.models import CellRecord, NoData, Table

logger = logging.getLogger(__name__)

NO_DATA = "No data to reshape!"
RETRY_HINT = "Perhaps retry with `header = False`?"

_DISALLOWED = re.compile(r"[^\w.]")


def make_name(text: str) -> str:
    """Turn arbitrary header text into an identifier-like column name.

    Characters other than letters, digits (any script), "_" and "." become
    ".". A name that starts with a digit, an underscore, or a dot followed by
    a digit gets an "X" prefix; an empty name becomes "X". Duplicates are not
    resolved.
    """
    name = _DISALLOWED.sub(".", text)
    if not name or name[0].isdigit() or name[0] == "_" or re.match(r"^\.\d", name):
        name = "X" + name
    return name


def _synthetic_name(col: int) -> str:
    return f"C{col}"


def reshape(cells: Iterable[CellRecord], header: bool = True) -> Table | NoData:
    """Reshape cell records into a Table.

    Args:
        cells: Records of one worksheet, e.g. a CellFeed.
        header: Take the first spanned row as column names.

    Returns:
        Table with one row per spanned row (less the header) and one column per
        spanned column, or NoData when there is nothing to reshape.
    """
    records = list(cells)
    if not records:
        logger.info(NO_DATA)
        return NoData(reason="empty", message=NO_DATA)

    row_min = min(rec.row for rec in records)
    row_max = max(rec.row for rec in records)
    col_min = min(rec.col for rec in records)
    col_max = max(rec.col for rec in records)

    rows = range(row_min, row_max + 1)
    cols = range(col_min, col_max + 1)
    lookup = {(rec.row, rec.col): rec.text for rec in records}

    if header:
        if len(rows) < 2:
            message = f"{NO_DATA}\n{RETRY_HINT}"
            logger.info(message)
            return NoData(reason="single_row", message=message)

        names = []
        for col in cols:
            text = lookup.get((row_min, col))
            names.append(make_name(text) if text and text.strip() else _synthetic_name(col))
        rows = rows[1:]
    else:
        names = [_synthetic_name(col) for col in cols]

    columns = [[lookup.get((row, col)) for row in rows] for col in cols]
    return Table(names=names, columns=columns)
