"""CSV ingestion.

Usage:
    from csv2sheets.csvfile import load_rows

    rows = load_rows("file.csv")  # [["a", "b"], ["1", "2"]]
"""

from __future__ import annotations

from csv2sheets.csvfile.exceptions import CSVFileNotFoundError, CSVLoadError, CSVParseError
from csv2sheets.csvfile.loader import Grid, load_rows

__all__ = ["load_rows", "Grid", "CSVLoadError", "CSVFileNotFoundError", "CSVParseError"]
