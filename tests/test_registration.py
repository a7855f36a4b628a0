"""Tests for spreadsheet registration and the client facade."""

from datetime import datetime, timezone

import pytest

from sheetfeed.google import AuthorizationRequired
from sheetfeed.sheets import (
    SheetsAPIError,
    SheetsClient,
    WorksheetNotFoundError,
    register,
)
from sheetfeed.sheets.registration import (
    REL_CELLSFEED,
    REL_EXPORTCSV,
    REL_LISTFEED,
    extract_key,
    worksheets_feed_url,
)

from conftest import FEED_OPEN, FEED_ROOT, KEY


def _ws_entry(title, ws_id, rows, cols, links=True, counts=True):
    base = f"{FEED_ROOT}/worksheets/{KEY}/private/full/{ws_id}"
    link_xml = ""
    if links:
        link_xml = (
            f'<link rel="{REL_LISTFEED}" href="{FEED_ROOT}/list/{KEY}/{ws_id}/private/full"/>'
            f'<link rel="{REL_CELLSFEED}" href="{FEED_ROOT}/cells/{KEY}/{ws_id}/private/full"/>'
            f'<link rel="{REL_EXPORTCSV}" '
            f'href="https://docs.google.com/spreadsheets/d/{KEY}/export?gid=0&amp;format=csv"/>'
        )
    count_xml = ""
    if counts:
        count_xml = f"<gs:rowCount>{rows}</gs:rowCount><gs:colCount>{cols}</gs:colCount>"
    return f"<entry><id>{base}</id><title>{title}</title>{link_xml}{count_xml}</entry>"


def _worksheets_feed(*entries):
    return (
        f"{FEED_OPEN}<title>Gapminder</title>"
        "<updated>2015-03-04T17:39:42.123Z</updated>"
        f'<link rel="alternate" type="text/html" '
        f'href="https://docs.google.com/spreadsheets/d/{KEY}/edit"/>'
        f"{''.join(entries)}</feed>"
    ).encode()


@pytest.fixture
def gapminder_feed():
    return _worksheets_feed(
        _ws_entry("Africa", "od6", 625, 6),
        _ws_entry("Americas", "ocy", 301, 6),
        _ws_entry("Old", "oxz", 10, 2, links=False),
    )


class TestExtractKey:
    """Keys from keys and URLs."""

    @pytest.mark.parametrize(
        "value",
        [
            KEY,
            f" {KEY} ",
            f"https://docs.google.com/spreadsheets/d/{KEY}/edit#gid=0",
            f"https://docs.google.com/spreadsheet/ccc?key={KEY}&usp=sharing",
        ],
    )
    def test_extract_key(self, value):
        """Should find the key in any supported form."""
        assert extract_key(value) == KEY

    def test_feed_url(self):
        """Should build the worksheets feed URL."""
        assert worksheets_feed_url(KEY, "public", base_url="https://example.test/feeds") == (
            f"https://example.test/feeds/worksheets/{KEY}/public/full"
        )


class TestRegister:
    """Worksheets feed parsing."""

    def test_spreadsheet(self, make_transport, gapminder_feed):
        """Should describe the spreadsheet and each worksheet."""
        ss = register(make_transport(gapminder_feed), KEY)
        assert ss.key == KEY
        assert ss.title == "Gapminder"
        assert ss.ws_titles == ["Africa", "Americas", "Old"]
        assert ss.updated == datetime(2015, 3, 4, 17, 39, 42, 123000, tzinfo=timezone.utc)
        assert ss.url.endswith("/edit")

    def test_worksheet_refs(self, make_transport, gapminder_feed):
        """Should record extents and feed links."""
        ws = register(make_transport(gapminder_feed), KEY).worksheet("Americas")
        assert (ws.row_extent, ws.col_extent) == (301, 6)
        assert ws.ws_id == "ocy"
        assert ws.cellsfeed == f"{FEED_ROOT}/cells/{KEY}/ocy/private/full"
        assert ws.listfeed == f"{FEED_ROOT}/list/{KEY}/ocy/private/full"
        assert ws.exportcsv.endswith("format=csv")

    def test_missing_links(self, make_transport, gapminder_feed):
        """Should record absent feeds as None."""
        ws = register(make_transport(gapminder_feed), KEY).worksheet(3)
        assert ws.cellsfeed is None
        assert ws.exportcsv is None

    def test_missing_counts(self, make_transport):
        """Should fail when a worksheet entry lacks its extent."""
        body = _worksheets_feed(_ws_entry("Broken", "od6", 1, 1, counts=False))
        with pytest.raises(SheetsAPIError, match="rowCount"):
            register(make_transport(body), KEY)

    def test_public_without_auth(self, make_transport, gapminder_feed, sent_requests):
        """Should read the public feed when no credentials are configured."""
        register(make_transport(gapminder_feed), f"https://docs.google.com/spreadsheets/d/{KEY}/")
        assert sent_requests[0].url.path == f"/feeds/worksheets/{KEY}/public/full"
        assert "authorization" not in sent_requests[0].headers
        assert sent_requests[0].headers["gdata-version"] == "3.0"

    def test_private_with_auth(self, make_transport, gapminder_feed, sent_requests):
        """Should read the private feed with a bearer token when authenticated."""
        register(make_transport(gapminder_feed, auth=StaticToken("tok")), KEY)
        assert sent_requests[0].url.path == f"/feeds/worksheets/{KEY}/private/full"
        assert sent_requests[0].headers["authorization"] == "Bearer tok"

    def test_explicit_visibility(self, make_transport, gapminder_feed, sent_requests):
        """Should honour an explicit visibility."""
        register(make_transport(gapminder_feed, auth=StaticToken("tok")), KEY, "public")
        assert "/public/full" in sent_requests[0].url.path


class TestWorksheetLookup:
    """Spreadsheet.worksheet."""

    def test_by_position_and_title(self, make_transport, gapminder_feed):
        """Should find worksheets by 1-based position or title."""
        ss = register(make_transport(gapminder_feed), KEY)
        assert ss.worksheet().title == "Africa"
        assert ss.worksheet(2) is ss.worksheet("Americas")

    def test_logs_resolved_title(self, make_transport, gapminder_feed, caplog):
        """Should log the title of the worksheet it resolves."""
        ss = register(make_transport(gapminder_feed), KEY)
        with caplog.at_level("INFO", logger="sheetfeed.sheets.models"):
            ss.worksheet(2)
        assert 'Accessing worksheet titled "Americas"' in caplog.text

    @pytest.mark.parametrize("ws", [0, 4, "Europe", True])
    def test_not_found(self, make_transport, gapminder_feed, ws):
        """Should raise WorksheetNotFoundError listing the titles."""
        ss = register(make_transport(gapminder_feed), KEY)
        with pytest.raises(WorksheetNotFoundError) as exc_info:
            ss.worksheet(ws)
        assert "Africa" in str(exc_info.value)


class StaticToken:
    def __init__(self, token):
        self.token = token

    def get_access_token(self):
        return self.token


class Unauthorized(StaticToken):
    def is_authorized(self):
        return False

    def get_authorization_url(self):
        return "https://accounts.google.com/o/oauth2/auth?client_id=x"


class TestSheetsClient:
    """The client facade."""

    def test_register_and_read(self, make_transport, gapminder_feed):
        """Should delegate to the module functions through one transport."""
        client = SheetsClient(transport=make_transport(gapminder_feed))
        ws = client.worksheet(KEY, "Africa")
        assert ws.title == "Africa"

    def test_requires_authorization(self):
        """Should refuse to build a transport for unauthorized OAuth."""
        client = SheetsClient(auth=Unauthorized("tok"))
        with pytest.raises(AuthorizationRequired) as exc_info:
            client.register(KEY)
        assert "accounts.google.com" in exc_info.value.authorization_url

    def test_context_manager(self, make_transport, gapminder_feed):
        """Should close cleanly as a context manager."""
        with SheetsClient(transport=make_transport(gapminder_feed)) as client:
            assert client.register(KEY).title == "Gapminder"
