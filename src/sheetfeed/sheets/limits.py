"""Validation of the row and column limits sent to the cell feed.

Each bound is checked on its own first, so one malformed bound yields a
single error naming it instead of a cascade of failed comparisons. Only then
are the bounds compared with each other and with the worksheet extent.
"""

from __future__ import annotations

import enum
import math
import numbers
from collections.abc import Mapping
from typing import Any

from sheetfeed.sheets.exceptions import LimitsError
from sheetfeed.sheets.models import LIMIT_NAMES, RangeLimits

_INVALID = object()


def _not_categorical(value: Any) -> Any:
    # bool is an int subclass and Enum members can be ints; neither is a row number
    if isinstance(value, (enum.Enum, bool)):
        return _INVALID
    return value


def _make_integer(value: Any) -> Any:
    if value is _INVALID:
        return value
    if isinstance(value, (list, tuple)):
        return [_make_integer(_not_categorical(v)) for v in value]
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        return int(value) if math.isfinite(value) else _INVALID
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return _INVALID
        return int(number) if math.isfinite(number) else _INVALID
    return _INVALID


def _length_one(value: Any) -> Any:
    if isinstance(value, list):
        if len(value) != 1 or isinstance(value[0], list):
            return _INVALID
        return value[0]
    return value


def _positive(value: Any) -> Any:
    if value is _INVALID or value > 0:
        return value
    return _INVALID


def _normalize_bound(value: Any) -> Any:
    return _positive(_length_one(_make_integer(_not_categorical(value))))


def _as_mapping(limits: RangeLimits | Mapping[str, Any] | None) -> dict[str, Any]:
    if limits is None:
        return {}
    if isinstance(limits, RangeLimits):
        return {name: getattr(limits, name) for name in LIMIT_NAMES}

    normalized = {}
    for key, value in limits.items():
        name = key.replace("-", "_")
        if name not in LIMIT_NAMES:
            raise LimitsError(
                f"Unknown limit {key!r}; expected one of {', '.join(LIMIT_NAMES)}"
            )
        normalized[name] = value
    return normalized


def _check_le(x_name: str, x: int | None, ub_name: str, upper_bound: int | None) -> None:
    if x is not None and upper_bound is not None and x > upper_bound:
        raise LimitsError(
            f"{x_name} must be less than or equal to {ub_name}\n"
            f"{x_name} = {x}, {ub_name} = {upper_bound}"
        )


def validate_limits(
    limits: RangeLimits | Mapping[str, Any] | None,
    row_extent: int | None = None,
    col_extent: int | None = None,
) -> RangeLimits:
    """Check and normalize cell feed limits.

    Args:
        limits: RangeLimits, or a mapping with any of min_row, max_row,
            min_col, max_col (hyphenated keys such as "min-row" also work).
        row_extent: Nominal number of rows in the worksheet, if known.
        col_extent: Nominal number of columns in the worksheet, if known.

    Returns:
        The limits as RangeLimits, unchanged when already valid.

    Raises:
        LimitsError: If any bound is not a single positive integer, or the
            bounds are inconsistent with each other or the worksheet extent.
    """
    raw = _as_mapping(limits)

    checked = {}
    invalid = {}
    for name, value in raw.items():
        if value is None:
            continue
        normalized = _normalize_bound(value)
        if normalized is _INVALID:
            invalid[name] = value
        else:
            checked[name] = normalized

    if invalid:
        details = "\n".join(f"{name} = {value!r}" for name, value in invalid.items())
        raise LimitsError(
            "A row or column limit must be a single positive integer "
            f"(or not given at all).\nInvalid input:\n{details}"
        )

    result = RangeLimits(**checked)

    _check_le("min_row", result.min_row, "max_row", result.max_row)
    _check_le("min_row", result.min_row, "row_extent", row_extent)
    _check_le("max_row", result.max_row, "row_extent", row_extent)
    _check_le("min_col", result.min_col, "max_col", result.max_col)
    _check_le("min_col", result.min_col, "col_extent", col_extent)
    _check_le("max_col", result.max_col, "col_extent", col_extent)

    return result
