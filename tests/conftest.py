"""Shared fixtures: canned feed documents served through httpx.MockTransport."""

from xml.sax.saxutils import escape

import httpx
import pytest

from sheetfeed.sheets import CellRecord, FeedTransport, WorksheetExtent, WorksheetRef
from sheetfeed.sheets.cell_range import a1_label, rc_label

ATOM = "application/atom+xml; charset=UTF-8; type=feed"
FEED_ROOT = "https://spreadsheets.google.com/feeds"
KEY = "1abcKEY"

FEED_OPEN = (
    '<feed xmlns="http://www.w3.org/2005/Atom" '
    'xmlns:openSearch="http://a9.com/-/spec/opensearchrss/1.0/" '
    'xmlns:gs="http://schemas.google.com/spreadsheets/2006" '
    'xmlns:gsx="http://schemas.google.com/spreadsheets/2006/extended">'
)


def _cell_entry(row, col, text, editable):
    cell_url = f"{FEED_ROOT}/cells/{KEY}/od6/private/full/{rc_label(row, col)}"
    edit = f'<link rel="edit" type="application/atom+xml" href="{cell_url}/1"/>' if editable else ""
    return (
        f"<entry><id>{cell_url}</id>"
        f'<title type="text">{a1_label(row, col)}</title>'
        f'<link rel="self" type="application/atom+xml" href="{cell_url}"/>{edit}'
        f'<gs:cell row="{row}" col="{col}" inputValue="{escape(text)}">{escape(text)}</gs:cell>'
        "</entry>"
    )


@pytest.fixture
def cell_feed_xml():
    """Build a cell feed document from (row, col, text) triples."""

    def build(cells, editable=True):
        entries = "".join(_cell_entry(r, c, t, editable) for r, c, t in cells)
        return f"{FEED_OPEN}<title>Sheet1</title>{entries}</feed>".encode()

    return build


@pytest.fixture
def list_feed_xml():
    """Build a list feed document from column names and rows of text."""

    def build(names, rows):
        entries = []
        for row in rows:
            fields = "".join(f"<gsx:{n}>{escape(v)}</gsx:{n}>" for n, v in zip(names, row))
            entries.append(f"<entry><title>{escape(row[0])}</title>{fields}</entry>")
        return f"{FEED_OPEN}<title>Sheet1</title>{''.join(entries)}</feed>".encode()

    return build


@pytest.fixture
def sent_requests():
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture
def make_transport(sent_requests):
    """FeedTransport whose every GET answers with the given body."""

    def factory(content=b"", content_type=ATOM, status_code=200, auth=None):
        def handler(request):
            sent_requests.append(request)
            return httpx.Response(
                status_code, content=content, headers={"content-type": content_type}
            )

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return FeedTransport(auth=auth, client=client)

    return factory


@pytest.fixture
def worksheet():
    """A registered 100 x 10 worksheet with every feed link."""
    return WorksheetRef(
        title="Sheet1",
        extent=WorksheetExtent(row_extent=100, col_extent=10),
        cellsfeed=f"{FEED_ROOT}/cells/{KEY}/od6/private/full",
        listfeed=f"{FEED_ROOT}/list/{KEY}/od6/private/full",
        exportcsv=f"https://docs.google.com/spreadsheets/d/{KEY}/export?gid=0&format=csv",
        ws_id="od6",
    )


@pytest.fixture
def make_cells():
    """CellRecords from (row, col, text) triples."""

    def build(triples):
        return [
            CellRecord(
                position_a1=a1_label(r, c),
                position_rc=rc_label(r, c),
                row=r,
                col=c,
                text=t,
            )
            for r, c, t in triples
        ]

    return build
