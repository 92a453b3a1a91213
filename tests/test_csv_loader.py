"""Tests for CSV ingestion."""

import csv

import pytest

from csv2sheets.csvfile import CSVFileNotFoundError, CSVLoadError, CSVParseError, load_rows


@pytest.fixture
def write_csv(tmp_path):
    """Write raw bytes to file.csv and return its path."""

    def _write(content: bytes):
        path = tmp_path / "file.csv"
        path.write_bytes(content)
        return path

    return _write


class TestLoadRows:
    """Test well-formed input."""

    def test_simple_grid(self, write_csv):
        """Should map each record to a row of string cells."""
        assert load_rows(write_csv(b"a,b\n1,2\n")) == [["a", "b"], ["1", "2"]]

    def test_empty_file(self, write_csv):
        """Should return an empty grid for an empty file."""
        assert load_rows(write_csv(b"")) == []

    def test_no_trailing_newline(self, write_csv):
        assert load_rows(write_csv(b"a,b\n1,2")) == [["a", "b"], ["1", "2"]]

    def test_crlf_line_endings(self, write_csv):
        assert load_rows(write_csv(b"a,b\r\n1,2\r\n")) == [["a", "b"], ["1", "2"]]

    def test_values_are_verbatim(self, write_csv):
        """Should not trim, coerce or interpret cells."""
        rows = load_rows(write_csv(b" a , 007,=SUM(A1),3.50,\n"))
        assert rows == [[" a ", " 007", "=SUM(A1)", "3.50", ""]]

    def test_header_is_a_plain_row(self, write_csv):
        rows = load_rows(write_csv(b"name,age\nalice,30\n"))
        assert rows[0] == ["name", "age"]
        assert len(rows) == 2

    def test_quoted_fields(self, write_csv):
        """Should honor quoting, embedded delimiters, quotes and newlines."""
        content = b'name,note\n"Smith, J","line1\nline2"\n"say ""hi""",x\n'
        assert load_rows(write_csv(content)) == [
            ["name", "note"],
            ["Smith, J", "line1\nline2"],
            ['say "hi"', "x"],
        ]

    def test_ragged_rows_preserved(self, write_csv):
        """Should keep each record's own field count."""
        rows = load_rows(write_csv(b"a,b,c\n1\n4,5\n"))
        assert [len(row) for row in rows] == [3, 1, 2]

    def test_blank_lines_skipped(self, write_csv):
        assert load_rows(write_csv(b"a\n\nb\n\n")) == [["a"], ["b"]]

    def test_empty_quoted_field_is_a_record(self, write_csv):
        assert load_rows(write_csv(b'""\n')) == [[""]]

    def test_unicode(self, write_csv):
        assert load_rows(write_csv("café,日本\n".encode())) == [["café", "日本"]]

    @pytest.mark.parametrize(
        "records",
        [
            [["x"]],
            [["a", "b", "c"], ["1", "2", "3"], ["", "", ""]],
            [["comma, inside", 'quote " inside'], ["new\nline", "tab\tcell"]],
        ],
    )
    def test_structure_preserved(self, tmp_path, records):
        """Should return one row per record and one cell per field, in order."""
        path = tmp_path / "file.csv"
        with open(path, "w", newline="") as f:
            csv.writer(f).writerows(records)

        assert load_rows(path) == records


class TestLoadRowsErrors:
    """Test malformed and missing input."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(CSVFileNotFoundError) as exc_info:
            load_rows(tmp_path / "file.csv")
        assert isinstance(exc_info.value, CSVLoadError)
        assert exc_info.value.path.endswith("file.csv")

    def test_unterminated_quote(self, write_csv):
        """Should reject an unterminated quoted field."""
        with pytest.raises(CSVParseError, match="Malformed CSV"):
            load_rows(write_csv(b'a,"b\n1,2\n'))

    def test_quote_inside_unquoted_field(self, write_csv):
        """Should reject a quote in a field that does not start with one."""
        with pytest.raises(CSVParseError, match="bare") as exc_info:
            load_rows(write_csv(b'a"b,c\n'))
        assert exc_info.value.line == 1

    def test_bare_quote_reports_line(self, write_csv):
        """Should count lines, including newlines inside quoted fields."""
        with pytest.raises(CSVParseError) as exc_info:
            load_rows(write_csv(b'x,"multi\r\nline"\r\n1,2\r\n3,4"\r\n'))
        assert exc_info.value.line == 4

    def test_quote_after_leading_space(self, write_csv):
        with pytest.raises(CSVParseError, match="bare"):
            load_rows(write_csv(b'a, "b"\n'))

    def test_text_after_closing_quote(self, write_csv):
        with pytest.raises(CSVParseError):
            load_rows(write_csv(b'a,b\n"1"2,3\n'))

    def test_invalid_utf8(self, write_csv):
        with pytest.raises(CSVParseError, match="UTF-8"):
            load_rows(write_csv(b"a,b\n\xff\xfe,1\n"))

    def test_directory_is_not_a_csv(self, tmp_path):
        with pytest.raises(CSVLoadError):
            load_rows(tmp_path)
