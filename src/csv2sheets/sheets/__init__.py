"""Google Sheets API client with OAuth authentication.

Usage:
    from csv2sheets.sheets import SheetsClient

    client = SheetsClient()

    # Create a spreadsheet
    sheet = client.create_spreadsheet("Summary")

    # Write values
    client.batch_update_values(sheet.id, "A1", [["Name", "Age"], ["Alice", "30"]])
"""

from __future__ import annotations

from csv2sheets.sheets.client import Sheet, SheetsClient, Spreadsheet
from csv2sheets.sheets.exceptions import SheetsAPIError

__all__ = ["SheetsClient", "Spreadsheet", "Sheet", "SheetsAPIError"]
