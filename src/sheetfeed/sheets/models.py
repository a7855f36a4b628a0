"""Value types passed between the feed fetchers and the reshaping functions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from sheetfeed.sheets.convert import convert_column
from sheetfeed.sheets.exceptions import WorksheetNotFoundError

logger = logging.getLogger(__name__)

LINK_FIELDS = ("edit_link", "cell_id")


@dataclass(frozen=True)
class CellRecord:
    """One cell returned by the cell feed."""

    position_a1: str
    position_rc: str
    row: int
    col: int
    text: str
    edit_link: str | None = None
    cell_id: str | None = None

    def without_links(self) -> CellRecord:
        return replace(self, edit_link=None, cell_id=None)


CELL_FIELDS = tuple(f.name for f in fields(CellRecord))


@dataclass(frozen=True)
class RangeLimits:
    """Bounding rectangle of a cell query; None means unbounded."""

    min_row: int | None = None
    max_row: int | None = None
    min_col: int | None = None
    max_col: int | None = None

    @property
    def is_unbounded(self) -> bool:
        return all(getattr(self, name) is None for name in LIMIT_NAMES)

    def to_query(self) -> dict[str, int]:
        """Feed query parameters for the bounds that are present."""
        return {
            name.replace("_", "-"): getattr(self, name)
            for name in LIMIT_NAMES
            if getattr(self, name) is not None
        }


LIMIT_NAMES = ("min_row", "max_row", "min_col", "max_col")


@dataclass(frozen=True)
class WorksheetExtent:
    """Nominal size of a worksheet, independent of how much is populated."""

    row_extent: int
    col_extent: int


@dataclass(frozen=True)
class WorksheetRef:
    """A registered worksheet and the feed endpoints it exposes."""

    title: str
    extent: WorksheetExtent
    cellsfeed: str | None = None
    listfeed: str | None = None
    exportcsv: str | None = None
    ws_id: str | None = None

    @property
    def row_extent(self) -> int:
        return self.extent.row_extent

    @property
    def col_extent(self) -> int:
        return self.extent.col_extent


@dataclass(frozen=True)
class Spreadsheet:
    """A registered spreadsheet."""

    key: str
    title: str
    worksheets: tuple[WorksheetRef, ...] = ()
    updated: datetime | None = None
    url: str | None = None

    @property
    def ws_titles(self) -> list[str]:
        return [ws.title for ws in self.worksheets]

    def worksheet(self, ws: int | str = 1) -> WorksheetRef:
        """Look up a worksheet by 1-based position or by title.

        Raises:
            WorksheetNotFoundError: If nothing matches.
        """
        found = None
        if isinstance(ws, int) and not isinstance(ws, bool):
            if 1 <= ws <= len(self.worksheets):
                found = self.worksheets[ws - 1]
        elif isinstance(ws, str):
            found = next((c for c in self.worksheets if c.title == ws), None)
        if found is None:
            raise WorksheetNotFoundError(ws, self.ws_titles)
        logger.info(f'Accessing worksheet titled "{found.title}"')
        return found


@dataclass(frozen=True)
class CellFeed:
    """Ordered cell records from one cell feed request.

    An empty feed still reports its full field set, so callers can rely on
    consistent columns whether or not any cells came back.
    """

    records: tuple[CellRecord, ...] = ()
    ws_title: str | None = None
    read_only: bool = False
    include_links: bool = False

    @property
    def fields(self) -> tuple[str, ...]:
        if self.include_links:
            return CELL_FIELDS
        return tuple(name for name in CELL_FIELDS if name not in LINK_FIELDS)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[CellRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> CellRecord:
        return self.records[index]

    def to_rows(self) -> list[dict[str, Any]]:
        """One dict per record, keyed by ``fields``."""
        return [{name: getattr(rec, name) for name in self.fields} for rec in self.records]


@dataclass(frozen=True)
class Table:
    """Named columns of equal length. Duplicate names are allowed."""

    names: list[str] = field(default_factory=list)
    columns: list[list[Any]] = field(default_factory=list)

    def __post_init__(self):
        if len(self.names) != len(self.columns):
            raise ValueError(
                f"Table has {len(self.names)} names but {len(self.columns)} columns"
            )
        lengths = {len(col) for col in self.columns}
        if len(lengths) > 1:
            raise ValueError(f"Table columns have unequal lengths: {sorted(lengths)}")

    @classmethod
    def from_rows(cls, names: list[str], rows: list[list[Any]]) -> Table:
        columns = [[row[j] for row in rows] for j in range(len(names))]
        return cls(names=list(names), columns=columns)

    @property
    def n_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    @property
    def n_cols(self) -> int:
        return len(self.columns)

    @property
    def shape(self) -> tuple[int, int]:
        return self.n_rows, self.n_cols

    @property
    def rows(self) -> list[list[Any]]:
        return [list(row) for row in zip(*self.columns)]

    def __len__(self) -> int:
        return self.n_rows

    def column(self, name: str) -> list[Any]:
        """Values of the first column called ``name``."""
        try:
            return self.columns[self.names.index(name)]
        except ValueError:
            raise KeyError(name) from None

    def to_records(self) -> list[dict[str, Any]]:
        """One dict per row; with duplicate names the rightmost column wins."""
        return [dict(zip(self.names, row)) for row in self.rows]

    def convert(self, na_strings: tuple[str, ...] = ("NA", "")) -> Table:
        """Copy with each column converted to the narrowest type its text allows."""
        return Table(
            names=list(self.names),
            columns=[convert_column(col, na_strings) for col in self.columns],
        )


@dataclass(frozen=True)
class NoData:
    """Falsy result from ``reshape`` when there is nothing to reshape."""

    reason: str
    message: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class NamedVector:
    """Ordered (cell address, value) pairs."""

    keys: list[str] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(zip(self.keys, self.values))

    def __getitem__(self, key: str) -> Any:
        try:
            return self.values[self.keys.index(key)]
        except ValueError:
            raise KeyError(key) from None

    def items(self) -> list[tuple[str, Any]]:
        return list(zip(self.keys, self.values))

    def to_dict(self) -> dict[str, Any]:
        return dict(zip(self.keys, self.values))
