"""Google Sheets API client implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httplib2
from google.auth import exceptions as google_auth_exceptions
from googleapiclient.errors import HttpError

from csv2sheets.google import GoogleOAuth, TokenError
from csv2sheets.sheets.exceptions import SheetsAPIError

logger = logging.getLogger(__name__)

RAW = "RAW"
USER_ENTERED = "USER_ENTERED"
VALUE_INPUT_OPTIONS = (RAW, USER_ENTERED)


@dataclass
class Sheet:
    """Represents a sheet within a spreadsheet."""

    id: int
    title: str
    index: int
    row_count: int = 1000
    column_count: int = 26


@dataclass
class Spreadsheet:
    """Represents a Google Spreadsheet."""

    id: str
    title: str
    sheets: list[Sheet] | None = None
    url: str | None = None


class SheetsClient:
    """Google Sheets API client with OAuth authentication.

    Usage:
        client = SheetsClient(auth=GoogleOAuth(scopes=["sheets"]))

        # Create a spreadsheet
        sheet = client.create_spreadsheet("Summary")

        # Write a grid starting at the top-left cell
        client.batch_update_values(sheet.id, "A1", [["a", "b"], ["1", "2"]])

    Every failed call raises SheetsAPIError; nothing is retried.
    """

    def __init__(
        self,
        auth: GoogleOAuth | None = None,
        service: Any = None,
    ) -> None:
        """Initialize Sheets client.

        Args:
            auth: Authorized GoogleOAuth used to build the service on first use.
            service: Prebuilt Sheets v4 service. Takes precedence over `auth`.
        """
        self._auth = auth
        self._service = service

    def _get_service(self) -> Any:
        """Get or create Sheets API service."""
        if self._service is None:
            if self._auth is None:
                self._auth = GoogleOAuth(scopes=["sheets"])
            if not self._auth.is_authorized():
                raise TokenError(
                    "Sheets API requires OAuth authorization. "
                    "Run 'csv2sheets login' to authorize."
                )
            self._service = self._auth.build_service("sheets", "v4")
        return self._service

    def _execute(self, operation: str, request: Any) -> dict[str, Any]:
        """Execute an API request, converting failures to SheetsAPIError."""
        try:
            return request.execute()
        except HttpError as e:
            raise SheetsAPIError(f"{operation} failed: {e}", status_code=e.resp.status) from e
        except (
            google_auth_exceptions.GoogleAuthError,
            httplib2.HttpLib2Error,
            OSError,
        ) as e:
            raise SheetsAPIError(f"{operation} failed: {e}") from e

    # =========================================================================
    # Spreadsheets
    # =========================================================================

    def create_spreadsheet(self, title: str) -> Spreadsheet:
        """Create a new spreadsheet.

        Args:
            title: Spreadsheet title.

        Returns:
            Created Spreadsheet.

        Raises:
            SheetsAPIError: If the API call fails.
        """
        service = self._get_service()

        body = {"properties": {"title": title}}

        result = self._execute(
            "Create spreadsheet", service.spreadsheets().create(body=body)
        )
        spreadsheet = self._parse_spreadsheet(result)
        logger.debug(f"Created spreadsheet {spreadsheet.id}")
        return spreadsheet

    # =========================================================================
    # Writing Data
    # =========================================================================

    def batch_update_values(
        self,
        spreadsheet_id: str,
        range_notation: str,
        values: list[list[Any]],
        value_input_option: str = RAW,
    ) -> dict[str, Any]:
        """Write a grid of values in one batch request.

        The request is sent even when `values` is empty.

        Args:
            spreadsheet_id: Spreadsheet ID.
            range_notation: A1 notation of the top-left cell (e.g., "A1").
            values: 2D list of values to write.
            value_input_option: How to interpret input ("RAW" or "USER_ENTERED").

        Returns:
            The BatchUpdateValuesResponse as a dict.

        Raises:
            ValueError: If `value_input_option` is unknown.
            SheetsAPIError: If the API call fails.
        """
        if value_input_option not in VALUE_INPUT_OPTIONS:
            raise ValueError(
                f"Unknown value input option: {value_input_option}. "
                f"Use one of: {list(VALUE_INPUT_OPTIONS)}"
            )

        service = self._get_service()
        body = {
            "valueInputOption": value_input_option,
            "data": [{"range": range_notation, "values": values}],
        }
        return self._execute(
            "BatchUpdate",
            service.spreadsheets()
            .values()
            .batchUpdate(spreadsheetId=spreadsheet_id, body=body),
        )

    def _parse_spreadsheet(self, data: dict) -> Spreadsheet:
        """Parse spreadsheet from API response."""
        sheets = []
        for sheet_data in data.get("sheets", []):
            props = sheet_data.get("properties", {})
            grid_props = props.get("gridProperties", {})
            sheets.append(
                Sheet(
                    id=props.get("sheetId", 0),
                    title=props.get("title", ""),
                    index=props.get("index", 0),
                    row_count=grid_props.get("rowCount", 1000),
                    column_count=grid_props.get("columnCount", 26),
                )
            )

        return Spreadsheet(
            id=data["spreadsheetId"],
            title=data.get("properties", {}).get("title", ""),
            sheets=sheets,
            url=data.get("spreadsheetUrl"),
        )
