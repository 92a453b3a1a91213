"""Read a CSV file into a grid of string cells."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

from csv2sheets.csvfile.exceptions import CSVFileNotFoundError, CSVParseError

logger = logging.getLogger(__name__)

Row = list[str]
Grid = list[Row]

DELIMITER = ","
QUOTE = '"'


def find_bare_quote(text: str) -> int | None:
    """Return the line of the first quote inside an unquoted field.

    A field is quoted only when its first character is the quote; any
    other quote in an unquoted field is an error. Line numbers are 1-based.
    """
    line = 1
    at_field_start = True
    in_quotes = False
    closing = False  # just saw a quote inside a quoted field

    for i, char in enumerate(text):
        if in_quotes:
            if char == QUOTE:
                in_quotes = False
                closing = True
            elif char == "\n" or (char == "\r" and text[i + 1 : i + 2] != "\n"):
                line += 1
            continue

        if closing:
            closing = False
            if char == QUOTE:
                # doubled quote, still inside the field
                in_quotes = True
                continue

        if char == DELIMITER:
            at_field_start = True
        elif char == "\n" or char == "\r":
            if char == "\n" or text[i + 1 : i + 2] != "\n":
                line += 1
            at_field_start = True
        elif char == QUOTE and at_field_start:
            in_quotes = True
            at_field_start = False
        elif char == QUOTE:
            return line
        else:
            at_field_start = False

    return None


def load_rows(path: str | Path) -> Grid:
    """Load every record of a CSV file.

    Fields are kept verbatim as strings: no type coercion, trimming or
    header handling. Blank lines are not records. An empty file gives an
    empty grid.

    Args:
        path: CSV file path.

    Returns:
        One row per record, one cell per field.

    Raises:
        CSVFileNotFoundError: If the file does not exist.
        CSVParseError: If the file is not valid UTF-8 CSV.
    """
    path = Path(path)
    try:
        f = open(path, newline="", encoding="utf-8")
    except FileNotFoundError as e:
        raise CSVFileNotFoundError(f"CSV file not found: {path}", str(path)) from e
    except OSError as e:
        raise CSVParseError(f"Unable to open CSV file {path}: {e}", str(path)) from e

    with f:
        try:
            text = f.read()
        except UnicodeDecodeError as e:
            raise CSVParseError(f"CSV file {path} is not valid UTF-8: {e}", str(path)) from e

    bare_quote_line = find_bare_quote(text)
    if bare_quote_line is not None:
        raise CSVParseError(
            f"Malformed CSV in {path} at line {bare_quote_line}: "
            'bare " in non-quoted field',
            str(path),
            line=bare_quote_line,
        )

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=DELIMITER, strict=True)
    try:
        rows = [list(record) for record in reader if record]
    except csv.Error as e:
        raise CSVParseError(
            f"Malformed CSV in {path} at line {reader.line_num}: {e}",
            str(path),
            line=reader.line_num,
        ) from e

    logger.info(f"Read {len(rows)} rows from {path}")
    return rows
