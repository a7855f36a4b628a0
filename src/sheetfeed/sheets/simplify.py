"""Simplify cell-level records into a named vector."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sheetfeed.sheets.convert import convert_value
from sheetfeed.sheets.models import CellRecord, NamedVector

logger = logging.getLogger(__name__)

NOTATIONS = {"A1": "position_a1", "RC": "position_rc", "R1C1": "position_rc"}


def _infer_header(records: list[CellRecord]) -> bool:
    # a single labelled column read from the top of the sheet
    return min(rec.row for rec in records) == 1 and len({rec.col for rec in records}) == 1


def simplify(
    cells: Iterable[CellRecord],
    convert: bool = True,
    notation: str = "A1",
    header: bool | None = None,
) -> NamedVector:
    """Turn cell records into (address, value) pairs.

    Unlike ``reshape``, nothing is densified: a cell appears only if the feed
    returned it, which for empty cells means the fetch asked for them.

    Args:
        cells: Records of one worksheet, e.g. a CellFeed.
        convert: Convert each value to bool, int or float where its text
            parses unambiguously; "" and "NA" become None.
        notation: "A1" or "RC" ("R1C1" is accepted too) for the keys.
        header: Drop the records of the first row. None infers it: true when
            the records start at row 1 and all share one column.

    Raises:
        ValueError: If ``notation`` is not recognised.
    """
    try:
        key_field = NOTATIONS[notation]
    except KeyError:
        raise ValueError(
            f"Unknown notation {notation!r}; expected one of {', '.join(NOTATIONS)}"
        ) from None

    records = list(cells)
    if not records:
        logger.info("No cells to simplify")
        return NamedVector()

    if header is None:
        header = _infer_header(records)

    if header:
        first_row = min(rec.row for rec in records)
        records = [rec for rec in records if rec.row > first_row]

    keys = [getattr(rec, key_field) for rec in records]
    values = [convert_value(rec.text) if convert else rec.text for rec in records]
    return NamedVector(keys=keys, values=values)
