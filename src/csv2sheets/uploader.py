"""Upload a CSV file as a new Google spreadsheet.

Steps run strictly in order and the first failure propagates:

    load credentials -> authenticate -> create spreadsheet
        -> load CSV -> batch update -> report

A spreadsheet created before a later step fails is left in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from csv2sheets.config import UploadSettings
from csv2sheets.csvfile import load_rows
from csv2sheets.google import GoogleOAuth, load_client_config
from csv2sheets.sheets import SheetsClient, Spreadsheet

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Outcome of a successful upload."""

    spreadsheet: Spreadsheet
    row_count: int
    response: dict[str, Any]

    @property
    def updated_cells(self) -> int:
        return self.response.get("totalUpdatedCells", 0)


def upload_csv(
    settings: UploadSettings,
    prompt: Callable[[str], str] | None = None,
    output: Callable[[str], Any] | None = None,
    open_browser: bool = False,
) -> UploadResult:
    """Create a spreadsheet and fill it with the rows of a CSV file.

    Args:
        settings: File paths, title and target range.
        prompt: Source of the authorization code when no usable token is cached.
        output: Receives user-facing messages (the authorization URL).
        open_browser: Open the authorization URL in a browser as well.

    Returns:
        UploadResult with the new spreadsheet and the batch update response.

    Raises:
        GoogleAuthError: Credentials, token or authorization failure.
        CSVLoadError: The CSV file is missing or malformed.
        SheetsAPIError: Spreadsheet creation or the value update failed.
    """
    client_config = load_client_config(settings.credentials_path)

    auth = GoogleOAuth(
        scopes=settings.scopes,
        credentials_path=settings.credentials_path,
        token_path=settings.token_path,
        client=client_config,
    )
    service = auth.obtain_service(
        "sheets", "v4", prompt=prompt, output=output, open_browser=open_browser
    )
    sheets = SheetsClient(auth=auth, service=service)

    spreadsheet = sheets.create_spreadsheet(settings.title)
    logger.info(f"Created {spreadsheet.url}")

    rows = load_rows(settings.csv_path)

    response = sheets.batch_update_values(
        spreadsheet.id,
        settings.target_range,
        rows,
        value_input_option=settings.value_input_option,
    )
    logger.info(f"Updated {response.get('totalUpdatedCells', 0)} cells in {spreadsheet.id}")

    return UploadResult(spreadsheet=spreadsheet, row_count=len(rows), response=response)
