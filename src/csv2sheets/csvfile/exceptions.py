"""CSV loading exceptions."""

from __future__ import annotations


class CSVLoadError(Exception):
    """Base exception for CSV loading errors."""

    def __init__(self, message: str, path: str):
        self.path = path
        super().__init__(message)


class CSVFileNotFoundError(CSVLoadError):
    """The CSV file does not exist."""


class CSVParseError(CSVLoadError):
    """The CSV file is not valid CSV."""

    def __init__(self, message: str, path: str, line: int | None = None):
        self.line = line
        super().__init__(message, path)
