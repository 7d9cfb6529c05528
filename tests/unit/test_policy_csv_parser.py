"""
Unit tests for the bulk upload CSV parser.

Run: pytest tests/unit/test_policy_csv_parser.py -v
"""

import pytest

from parsers.policy_csv_parser import (
    parse_policy_csv,
    read_upload_text,
    split_csv_line,
)
from exceptions import CSVFormatError


class TestSplitCsvLine:
    """Tests for split_csv_line()"""

    def test_splits_on_commas(self):
        assert split_csv_line("a,b,c") == ["a", "b", "c"]

    def test_comma_inside_quotes_does_not_split(self):
        """Quoted commas stay inside the field and the quotes are dropped."""
        # Act
        values = split_csv_line('"Doe, John",POL1,"Acme, Inc.",General')

        # Assert
        assert values == ["Doe, John", "POL1", "Acme, Inc.", "General"]

    def test_fields_are_trimmed(self):
        assert split_csv_line("  a , b  ,c ") == ["a", "b", "c"]

    def test_doubled_quotes_are_not_escapes(self):
        """Every quote only toggles quoting, so none survive."""
        assert split_csv_line('"He said ""hi"""') == ["He said hi"]

    def test_unterminated_quote_swallows_rest_of_line(self):
        assert split_csv_line('a,"b,c,d') == ["a", "b,c,d"]

    def test_empty_fields_are_kept(self):
        assert split_csv_line("a,,c,") == ["a", "", "c", ""]


class TestParsePolicyCsv:
    """Tests for parse_policy_csv()"""

    def test_rows_keyed_by_header(self):
        """Should return one dict per data line, keyed by header."""
        # Arrange
        text = (
            "Policyholder Name,Policy Number,Insurance Company\n"
            '"Doe, John",POL1,"Acme, Inc."\n'
            "Jane Roe,POL2,ICICI Lombard"
        )

        # Act
        rows = parse_policy_csv(text)

        # Assert
        assert rows == [
            {
                "Policyholder Name": "Doe, John",
                "Policy Number": "POL1",
                "Insurance Company": "Acme, Inc.",
            },
            {
                "Policyholder Name": "Jane Roe",
                "Policy Number": "POL2",
                "Insurance Company": "ICICI Lombard",
            },
        ]

    def test_blank_lines_are_skipped(self):
        text = "A,B\n1,2\n\n   \n3,4\n\n"

        rows = parse_policy_csv(text)

        assert rows == [{"A": "1", "B": "2"}, {"A": "3", "B": "4"}]

    def test_missing_trailing_cells_become_empty(self):
        rows = parse_policy_csv("A,B,C\n1")

        assert rows == [{"A": "1", "B": "", "C": ""}]

    def test_extra_cells_are_ignored(self):
        rows = parse_policy_csv("A\n1,2,3")

        assert rows == [{"A": "1"}]

    def test_every_row_has_every_header_in_order(self):
        rows = parse_policy_csv("Z,A,M\n1\n1,2\n1,2,3")

        assert all(list(row.keys()) == ["Z", "A", "M"] for row in rows)

    def test_windows_line_endings(self):
        rows = parse_policy_csv("A,B\r\n1,2\r\n3,4\r\n")

        assert rows == [{"A": "1", "B": "2"}, {"A": "3", "B": "4"}]

    def test_quoted_headers_are_unquoted(self):
        rows = parse_policy_csv('"Policy Number","Policy Type"\nPOL1,General')

        assert rows == [{"Policy Number": "POL1", "Policy Type": "General"}]

    @pytest.mark.parametrize("text", [
        "",
        "   \n  ",
        "Policyholder Name,Policy Number",
        "Policyholder Name,Policy Number\n\n\n",
    ])
    def test_no_data_rows_raises_format_error(self, text):
        """Header-only or empty files abort the upload."""
        with pytest.raises(CSVFormatError) as exc_info:
            parse_policy_csv(text)

        assert exc_info.value.message == "CSV must have header row and at least one data row"
        assert exc_info.value.code == "CSV_FORMAT_ERROR"
        assert exc_info.value.status_code == 422

    def test_header_with_only_blank_data_lines_between_content(self):
        """Two non-empty lines are enough even if later lines are blank."""
        rows = parse_policy_csv("A\n   \n1")

        assert rows == [{"A": "1"}]


class TestReadUploadText:
    """Tests for read_upload_text()"""

    def test_decodes_utf8(self):
        assert read_upload_text("A,B\nRamé,2".encode("utf-8")) == "A,B\nRamé,2"

    def test_strips_byte_order_mark(self):
        """A BOM must not end up glued to the first header."""
        # Arrange
        content = b"\xef\xbb\xbfPolicyholder Name,Policy Number\nJohn,POL1"

        # Act
        rows = parse_policy_csv(read_upload_text(content))

        # Assert
        assert list(rows[0].keys()) == ["Policyholder Name", "Policy Number"]

    def test_invalid_utf8_raises_format_error(self):
        with pytest.raises(CSVFormatError) as exc_info:
            read_upload_text(b"\xff\xfe\xfa")

        assert exc_info.value.message == "Failed to read file"
