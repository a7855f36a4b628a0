"""Tests for cell text conversion."""

import pytest

from sheetfeed.sheets import Table
from sheetfeed.sheets.convert import convert_column, convert_value


class TestConvertValue:
    """Per-value conversion."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("TRUE", True),
            ("false", False),
            ("12", 12),
            ("-7", -7),
            ("+3", 3),
            ("0.25", 0.25),
            (".5", 0.5),
            ("2.5E-3", 0.0025),
            ("NA", None),
            ("", None),
            (None, None),
            ("1,000", "1,000"),
            ("inf", "inf"),
            ("12 apples", "12 apples"),
            ("T", "T"),
        ],
    )
    def test_convert_value(self, text, expected):
        """Should try boolean, integer and real before falling back to text."""
        result = convert_value(text)
        assert result == expected
        assert type(result) is type(expected)

    def test_custom_na_strings(self):
        """Should honour custom missing markers."""
        assert convert_value("-", na_strings=("-",)) is None
        assert convert_value("", na_strings=("-",)) == ""


class TestConvertColumn:
    """Whole-column conversion."""

    def test_integer_column(self):
        """Should convert a column of integers, keeping missing as None."""
        assert convert_column(["1", "", "3", None]) == [1, None, 3, None]

    def test_mixed_numbers_widen(self):
        """Should widen integers to floats when reals are present."""
        result = convert_column(["1", "2.5"])
        assert result == [1.0, 2.5]
        assert all(isinstance(v, float) for v in result)

    def test_text_column(self):
        """Should keep text when any value is not numeric."""
        assert convert_column(["1", "two", "NA"]) == ["1", "two", None]

    def test_logical_column(self):
        """Should convert an all-boolean column."""
        assert convert_column(["TRUE", "FALSE", ""]) == [True, False, None]

    def test_all_missing(self):
        """Should return all None for an all-missing column."""
        assert convert_column(["", "NA"]) == [None, None]

    def test_already_converted(self):
        """Should leave already-converted values alone."""
        assert convert_column([1, None, 3]) == [1, None, 3]


class TestTableConvert:
    """Table.convert."""

    def test_converts_each_column(self):
        """Should convert each column independently."""
        table = Table.from_rows(["a", "b"], [["1", "x"], ["2", ""]])
        converted = table.convert()
        assert converted.columns == [[1, 2], ["x", None]]
        assert table.columns == [["1", "2"], ["x", ""]]
