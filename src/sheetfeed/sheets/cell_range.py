"""Cell addresses and range expressions in A1 and R1C1 notation."""

from __future__ import annotations

import re

from sheetfeed.sheets.exceptions import CellRangeError
from sheetfeed.sheets.models import RangeLimits

_A1_CELL = re.compile(r"^\$?([A-Za-z]{1,3})\$?(\d+)$")
_RC_CELL = re.compile(r"^[Rr](\d+)[Cc](\d+)$")
_A1_COL = re.compile(r"^\$?([A-Za-z]{1,3})$")
_ROW = re.compile(r"^\$?(\d+)$")


def letters_to_num(letters: str) -> int:
    """Column letters to 1-based column number ("A" -> 1, "AA" -> 27)."""
    if not letters or not letters.isalpha():
        raise CellRangeError(f"Invalid column letters: {letters!r}")
    num = 0
    for char in letters.upper():
        num = num * 26 + (ord(char) - ord("A") + 1)
    return num


def num_to_letters(num: int) -> str:
    """1-based column number to column letters (27 -> "AA")."""
    if num < 1:
        raise CellRangeError(f"Column number must be positive, got {num}")
    letters = ""
    while num:
        num, rem = divmod(num - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def a1_label(row: int, col: int) -> str:
    return f"{num_to_letters(col)}{row}"


def rc_label(row: int, col: int) -> str:
    return f"R{row}C{col}"


def _parse_corner(text: str) -> tuple[str, int | None, int | None]:
    """Return (notation, row, col) for one side of a range expression."""
    if match := _RC_CELL.match(text):
        return "RC", int(match.group(1)), int(match.group(2))
    if match := _A1_CELL.match(text):
        return "A1", int(match.group(2)), letters_to_num(match.group(1))
    if match := _A1_COL.match(text):
        return "A1", None, letters_to_num(match.group(1))
    if match := _ROW.match(text):
        return "A1", int(match.group(1)), None
    raise CellRangeError(f"Cannot parse cell reference {text!r}")


def _ordered(a: int | None, b: int | None) -> tuple[int | None, int | None]:
    if a is None or b is None:
        return a, b
    return min(a, b), max(a, b)


def parse_range(expression: str) -> RangeLimits:
    """Turn "B2:D4", "B4", "R2C2:R4C4", "A:C" or "2:5" into RangeLimits.

    A sheet prefix such as ``Sheet1!`` or ``'My Sheet'!`` is ignored.

    Raises:
        CellRangeError: If the expression is not a cell or rectangular range.
    """
    text = expression.strip()
    if "!" in text:
        text = text.rsplit("!", 1)[1]
    if not text:
        raise CellRangeError(f"Empty cell range: {expression!r}")

    parts = text.split(":")
    if len(parts) > 2:
        raise CellRangeError(f"Cell range has more than two corners: {expression!r}")

    corners = [_parse_corner(part.strip()) for part in parts]
    if len({notation for notation, _, _ in corners}) > 1:
        raise CellRangeError(f"Cell range mixes A1 and R1C1 notation: {expression!r}")

    if len(corners) == 1:
        _, row, col = corners[0]
        if row is None or col is None:
            raise CellRangeError(f"A single reference must name one cell: {expression!r}")
        corners = corners * 2

    (_, row_a, col_a), (_, row_b, col_b) = corners
    if (row_a is None) != (row_b is None) or (col_a is None) != (col_b is None):
        raise CellRangeError(f"Range corners are not of the same kind: {expression!r}")

    for value in (row_a, row_b, col_a, col_b):
        if value is not None and value < 1:
            raise CellRangeError(f"Row and column numbers must be positive: {expression!r}")

    min_row, max_row = _ordered(row_a, row_b)
    min_col, max_col = _ordered(col_a, col_b)
    return RangeLimits(min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col)
