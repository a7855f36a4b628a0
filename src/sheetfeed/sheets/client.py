"""Spreadsheet feed client."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sheetfeed.google.exceptions import AuthorizationRequired
from sheetfeed.sheets import cellfeed, listfeed, registration
from sheetfeed.sheets.models import CellFeed, RangeLimits, Spreadsheet, Table, WorksheetRef
from sheetfeed.sheets.transport import FeedTransport, TokenProvider


class SheetsClient:
    """Read Google Sheets through the spreadsheets feeds.

    Every call performs one request and returns fully materialized data;
    nothing is cached between calls.

    Usage:
        client = SheetsClient(auth=GoogleOAuth())

        # Register a spreadsheet and pick a worksheet
        ss = client.register("1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms")
        ws = ss.worksheet("Asia")

        # Cells of a region, reshaped into a table
        table = reshape(client.get_via_cf(ws, max_row=4))

        # First row as a named vector
        names = simplify(client.get_row(ws, 1))

        # Whole worksheet in one go
        table = client.get_via_csv(ws)

    Note:
        Private sheets need OAuth or a service account. Run
        `sheetfeed google login` to authorize. Sheets "published to the web"
        can be read with no auth at all.
    """

    def __init__(
        self,
        auth: TokenProvider | None = None,
        transport: FeedTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            auth: GoogleOAuth, GoogleServiceAccount, or None for published sheets.
            transport: Preconfigured transport; takes precedence over ``auth``.
        """
        self._auth = auth
        self._transport = transport

    def _get_transport(self) -> FeedTransport:
        """Get or create the feed transport."""
        if self._transport is None:
            is_authorized = getattr(self._auth, "is_authorized", None)
            if is_authorized is not None and not is_authorized():
                raise AuthorizationRequired(
                    self._auth.get_authorization_url(),
                    "Spreadsheet feeds require OAuth authorization. "
                    "Run 'sheetfeed google login' to authorize.",
                )
            self._transport = FeedTransport(auth=self._auth)
        return self._transport

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, key_or_url: str, visibility: str | None = None) -> Spreadsheet:
        """Register a spreadsheet by key or URL.

        Args:
            key_or_url: Spreadsheet key or browser URL.
            visibility: "private" or "public"; inferred from the credentials.

        Returns:
            Spreadsheet with one WorksheetRef per worksheet.
        """
        return registration.register(self._get_transport(), key_or_url, visibility)

    def worksheet(self, key_or_url: str, ws: int | str = 1) -> WorksheetRef:
        """Register a spreadsheet and return one of its worksheets."""
        return self.register(key_or_url).worksheet(ws)

    # =========================================================================
    # Cell feed
    # =========================================================================

    def get_via_cf(
        self,
        ws: WorksheetRef,
        min_row: Any = None,
        max_row: Any = None,
        min_col: Any = None,
        max_col: Any = None,
        limits: RangeLimits | Mapping[str, Any] | None = None,
        return_empty: bool = False,
        return_links: bool = False,
    ) -> CellFeed:
        """Cells of a rectangular region, one record per cell.

        See ``sheetfeed.sheets.cellfeed.get_via_cf``.
        """
        return cellfeed.get_via_cf(
            self._get_transport(),
            ws,
            min_row=min_row,
            max_row=max_row,
            min_col=min_col,
            max_col=max_col,
            limits=limits,
            return_empty=return_empty,
            return_links=return_links,
        )

    def get_row(self, ws: WorksheetRef, row: int | Iterable[int]) -> CellFeed:
        """Cells of a row or a contiguous range of rows."""
        return cellfeed.get_row(self._get_transport(), ws, row)

    def get_col(self, ws: WorksheetRef, col: int | Iterable[int]) -> CellFeed:
        """Cells of a column or a contiguous range of columns."""
        return cellfeed.get_col(self._get_transport(), ws, col)

    def get_cells(self, ws: WorksheetRef, cell_range: str) -> CellFeed:
        """Cells of a range such as "B2:D4" or "R2C2:R4C4"."""
        return cellfeed.get_cells(self._get_transport(), ws, cell_range)

    # =========================================================================
    # Rectangular worksheets
    # =========================================================================

    def get_via_lf(self, ws: WorksheetRef) -> Table:
        """Whole worksheet via the list feed (header names are mangled)."""
        return listfeed.get_via_lf(self._get_transport(), ws)

    def get_via_csv(self, ws: WorksheetRef) -> Table:
        """Whole worksheet via the CSV export (fastest)."""
        return listfeed.get_via_csv(self._get_transport(), ws)

    def close(self):
        """Close the underlying HTTP client."""
        if self._transport is not None:
            self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
