"""Best-effort conversion of cell text to Python values.

Conversion is an explicit ordered attempt: missing marker, boolean literal,
integer, real number, and finally the text itself.
"""

from __future__ import annotations

import re
from typing import Any

NA_STRINGS = ("NA", "")

TRUE_LITERALS = frozenset({"TRUE", "True", "true"})
FALSE_LITERALS = frozenset({"FALSE", "False", "false"})

_INT_RE = re.compile(r"^[+-]?\d+$")
_REAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _as_bool(text: str) -> bool | None:
    if text in TRUE_LITERALS:
        return True
    if text in FALSE_LITERALS:
        return False
    return None


def _is_int(text: str) -> bool:
    return bool(_INT_RE.match(text))


def _is_real(text: str) -> bool:
    return bool(_REAL_RE.match(text))


def convert_value(text: str | None, na_strings: tuple[str, ...] = NA_STRINGS) -> Any:
    """Convert one cell's text, leaving it as text when nothing else fits."""
    if text is None or text in na_strings:
        return None
    stripped = text.strip()
    as_bool = _as_bool(stripped)
    if as_bool is not None:
        return as_bool
    if _is_int(stripped):
        return int(stripped)
    if _is_real(stripped):
        return float(stripped)
    return text


def convert_column(
    values: list[str | None], na_strings: tuple[str, ...] = NA_STRINGS
) -> list[Any]:
    """Convert a whole column to one type.

    The column becomes bool, int or float only if every non-missing value
    parses as that type (int widens to float when the two mix). Otherwise the
    text is kept. Missing values become None in every case.
    """
    if any(v is not None and not isinstance(v, str) for v in values):
        # already converted
        return list(values)

    present = [v.strip() for v in values if v is not None and v not in na_strings]

    def missing(v):
        return v is None or v in na_strings

    if present and all(_as_bool(v) is not None for v in present):
        return [None if missing(v) else _as_bool(v.strip()) for v in values]
    if present and all(_is_int(v) for v in present):
        return [None if missing(v) else int(v.strip()) for v in values]
    if present and all(_is_real(v) for v in present):
        return [None if missing(v) else float(v.strip()) for v in values]
    return [None if missing(v) else v for v in values]
