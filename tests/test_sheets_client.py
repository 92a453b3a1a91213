"""Tests for the Google Sheets client."""

from unittest.mock import MagicMock

import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from csv2sheets.google import TokenError
from csv2sheets.sheets import SheetsAPIError, SheetsClient


def http_error(status: int, message: str = "boom") -> HttpError:
    content = ('{"error": {"code": %d, "message": "%s"}}' % (status, message)).encode()
    return HttpError(httplib2.Response({"status": status}), content)


class TestCreateSpreadsheet:
    """Test spreadsheet creation."""

    def test_create_sends_title_only(self, sheets_service):
        """Should send only the title and parse the response."""
        client = SheetsClient(service=sheets_service)

        spreadsheet = client.create_spreadsheet("Summary")

        sheets_service.spreadsheets.return_value.create.assert_called_once_with(
            body={"properties": {"title": "Summary"}}
        )
        assert spreadsheet.id == "sheet-123"
        assert spreadsheet.title == "Summary"
        assert spreadsheet.url == "https://docs.google.com/spreadsheets/d/sheet-123/edit"
        assert [sheet.title for sheet in spreadsheet.sheets] == ["Sheet1"]

    def test_create_api_error(self, sheets_service):
        """Should raise SheetsAPIError carrying the HTTP status."""
        create = sheets_service.spreadsheets.return_value.create
        create.return_value.execute.side_effect = http_error(403, "denied")
        client = SheetsClient(service=sheets_service)

        with pytest.raises(SheetsAPIError, match="Create spreadsheet failed") as exc_info:
            client.create_spreadsheet("Summary")
        assert exc_info.value.status_code == 403

    def test_create_transport_error(self, sheets_service):
        create = sheets_service.spreadsheets.return_value.create
        create.return_value.execute.side_effect = OSError("network unreachable")
        client = SheetsClient(service=sheets_service)

        with pytest.raises(SheetsAPIError) as exc_info:
            client.create_spreadsheet("Summary")
        assert exc_info.value.status_code is None

    def test_create_refresh_error(self, sheets_service):
        create = sheets_service.spreadsheets.return_value.create
        create.return_value.execute.side_effect = RefreshError("invalid_grant")
        client = SheetsClient(service=sheets_service)

        with pytest.raises(SheetsAPIError, match="invalid_grant"):
            client.create_spreadsheet("Summary")


class TestBatchUpdateValues:
    """Test writing values."""

    def test_batch_update_request(self, sheets_service):
        """Should send one RAW value range anchored at the given cell."""
        client = SheetsClient(service=sheets_service)

        response = client.batch_update_values("sheet-123", "A1", [["a", "b"], ["1", "2"]])

        batch_update = sheets_service.spreadsheets.return_value.values.return_value.batchUpdate
        batch_update.assert_called_once_with(
            spreadsheetId="sheet-123",
            body={
                "valueInputOption": "RAW",
                "data": [{"range": "A1", "values": [["a", "b"], ["1", "2"]]}],
            },
        )
        assert response["totalUpdatedCells"] == 4

    def test_empty_grid_still_sent(self, sheets_service):
        """Should issue the request even with no values."""
        client = SheetsClient(service=sheets_service)
        client.batch_update_values("sheet-123", "A1", [])

        batch_update = sheets_service.spreadsheets.return_value.values.return_value.batchUpdate
        body = batch_update.call_args.kwargs["body"]
        assert body["data"] == [{"range": "A1", "values": []}]

    def test_user_entered_option(self, sheets_service):
        client = SheetsClient(service=sheets_service)
        client.batch_update_values("sheet-123", "B2", [["=1+1"]], value_input_option="USER_ENTERED")

        batch_update = sheets_service.spreadsheets.return_value.values.return_value.batchUpdate
        assert batch_update.call_args.kwargs["body"]["valueInputOption"] == "USER_ENTERED"

    def test_unknown_option_rejected(self, sheets_service):
        client = SheetsClient(service=sheets_service)
        with pytest.raises(ValueError, match="Unknown value input option"):
            client.batch_update_values("sheet-123", "A1", [], value_input_option="PARSED")

        sheets_service.spreadsheets.assert_not_called()

    def test_batch_update_api_error(self, sheets_service):
        values = sheets_service.spreadsheets.return_value.values.return_value
        values.batchUpdate.return_value.execute.side_effect = http_error(400, "bad range")
        client = SheetsClient(service=sheets_service)

        with pytest.raises(SheetsAPIError, match="BatchUpdate failed") as exc_info:
            client.batch_update_values("sheet-123", "A1", [["a"]])
        assert exc_info.value.status_code == 400


class TestServiceCreation:
    """Test lazy service creation from an OAuth object."""

    def test_builds_service_from_auth(self, sheets_service):
        auth = MagicMock()
        auth.is_authorized.return_value = True
        auth.build_service.return_value = sheets_service
        client = SheetsClient(auth=auth)

        client.create_spreadsheet("Summary")
        client.create_spreadsheet("Again")

        auth.build_service.assert_called_once_with("sheets", "v4")

    def test_unauthorized(self):
        auth = MagicMock()
        auth.is_authorized.return_value = False
        client = SheetsClient(auth=auth)

        with pytest.raises(TokenError, match="csv2sheets login"):
            client.create_spreadsheet("Summary")
