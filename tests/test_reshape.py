"""Tests for reshaping cell records into tables."""

import pytest

from sheetfeed.sheets import CellFeed, NoData, Table, reshape
from sheetfeed.sheets.reshape import make_name

ABCD = [(1, 1, "a"), (1, 2, "b"), (2, 1, "1"), (2, 2, "2")]


class TestReshapeExamples:
    """Worked examples."""

    def test_with_header(self, make_cells):
        """Should use the first row as column names."""
        table = reshape(make_cells(ABCD), header=True)
        assert table.names == ["a", "b"]
        assert table.rows == [["1", "2"]]

    def test_without_header(self, make_cells):
        """Should name columns C<n> and keep every row."""
        table = reshape(make_cells(ABCD), header=False)
        assert table.names == ["C1", "C2"]
        assert table.rows == [["a", "b"], ["1", "2"]]

    def test_missing_cell_keeps_row(self, make_cells):
        """Should fill a missing cell with None instead of dropping its row."""
        cells = make_cells([(1, 1, "x"), (1, 2, "y"), (2, 1, "p"), (3, 1, "q"), (3, 2, "r")])
        table = reshape(cells, header=True)
        assert table.rows == [["p", None], ["q", "r"]]

    def test_entirely_missing_row(self, make_cells):
        """Should synthesize rows the feed returned nothing for."""
        cells = make_cells([(1, 1, "h"), (2, 1, "1"), (4, 1, "4")])
        table = reshape(cells, header=True)
        assert table.column("h") == ["1", None, "4"]


class TestReshapeShape:
    """Densification."""

    @pytest.mark.parametrize("header", [True, False])
    def test_dimensions(self, make_cells, header):
        """Should span the full rectangle of the records."""
        cells = make_cells([(3, 2, "a"), (7, 5, "b"), (4, 3, "c")])
        table = reshape(cells, header=header)
        assert table.n_rows == 7 - 3 + 1 - (1 if header else 0)
        assert table.n_cols == 5 - 2 + 1

    def test_offset_rectangle_names(self, make_cells):
        """Should name synthetic columns by their sheet column index."""
        table = reshape(make_cells([(5, 3, "x"), (6, 4, "y")]), header=False)
        assert table.names == ["C3", "C4"]
        assert table.rows == [["x", None], [None, "y"]]

    def test_row_order_independent_of_input_order(self, make_cells):
        """Should emit rows and columns in sheet order whatever the input order."""
        shuffled = make_cells([(2, 2, "2"), (1, 2, "b"), (2, 1, "1"), (1, 1, "a")])
        assert reshape(shuffled) == reshape(make_cells(ABCD))

    def test_idempotent_on_dense_input(self, make_cells):
        """Should reproduce a dense table from its own cells."""
        table = reshape(make_cells(ABCD), header=False)
        triples = [
            (i + 1, j + 1, value)
            for i, row in enumerate(table.rows)
            for j, value in enumerate(row)
        ]
        assert reshape(make_cells(triples), header=False) == table

    def test_accepts_cell_feed(self, make_cells):
        """Should accept a CellFeed directly."""
        feed = CellFeed(records=tuple(make_cells(ABCD)), ws_title="Sheet1")
        assert reshape(feed).names == ["a", "b"]


class TestReshapeHeader:
    """Header row handling."""

    def test_blank_header_cells(self, make_cells):
        """Should name blank or missing header cells C<col>."""
        cells = make_cells([(1, 1, "name"), (1, 2, ""), (2, 1, "x"), (2, 2, "y"), (2, 3, "z")])
        table = reshape(cells, header=True)
        assert table.names == ["name", "C2", "C3"]

    def test_sanitizes_header(self, make_cells):
        """Should turn header text into identifier-like names."""
        cells = make_cells([(1, 1, "Time 2 Eat!"), (1, 2, "2020"), (2, 1, "1"), (2, 2, "2")])
        assert reshape(cells).names == ["Time.2.Eat.", "X2020"]

    def test_non_ascii_header(self, make_cells):
        """Should keep letters of any script in header names."""
        cells = make_cells(
            [(1, 1, "Größe"), (1, 2, "日付"), (1, 3, "名前"), (2, 1, "1"), (2, 2, "2"), (2, 3, "3")]
        )
        assert reshape(cells).names == ["Größe", "日付", "名前"]

    def test_whitespace_header_cell(self, make_cells):
        """Should treat a whitespace-only header cell as blank."""
        cells = make_cells([(1, 1, "id"), (1, 2, "  "), (2, 1, "1"), (2, 2, "2")])
        assert reshape(cells).names == ["id", "C2"]

    def test_duplicate_names_kept(self, make_cells):
        """Should keep duplicate names rather than deduplicating."""
        cells = make_cells([(1, 1, "v"), (1, 2, "v"), (2, 1, "1"), (2, 2, "2")])
        table = reshape(cells)
        assert table.names == ["v", "v"]
        assert table.column("v") == ["1"]

    def test_empty_string_preserved_in_body(self, make_cells):
        """Should keep empty strings in the body distinct from missing cells."""
        cells = make_cells([(1, 1, "h1"), (1, 2, "h2"), (2, 1, ""), (3, 2, "v")])
        table = reshape(cells)
        assert table.rows == [["", None], [None, "v"]]


class TestReshapeNoData:
    """Nothing to reshape."""

    def test_empty_input(self):
        """Should signal an empty input."""
        result = reshape([])
        assert isinstance(result, NoData)
        assert not result
        assert result.reason == "empty"
        assert "No data to reshape" in result.message

    def test_empty_feed(self):
        """Should signal an empty feed even without header."""
        assert reshape(CellFeed(), header=False).reason == "empty"

    def test_single_row_with_header(self, make_cells):
        """Should suggest header=False when only one row is spanned."""
        result = reshape(make_cells([(1, 1, "a"), (1, 2, "b")]), header=True)
        assert result.reason == "single_row"
        assert "header = False" in result.message

    def test_single_row_without_header(self, make_cells):
        """Should reshape a single row when header is off."""
        table = reshape(make_cells([(1, 1, "a"), (1, 2, "b")]), header=False)
        assert isinstance(table, Table)
        assert table.rows == [["a", "b"]]


class TestMakeName:
    """Header sanitization."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("country", "country"),
            ("gdp per cap", "gdp.per.cap"),
            ("1952", "X1952"),
            ("_id", "X_id"),
            (".5", "X.5"),
            ("", "X"),
            ("a-b", "a.b"),
            ("año", "año"),
            ("Größe", "Größe"),
            ("日付", "日付"),
            ("prix (€)", "prix...."),
        ],
    )
    def test_make_name(self, text, expected):
        """Should produce identifier-like names."""
        assert make_name(text) == expected
