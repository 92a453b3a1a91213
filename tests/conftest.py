"""Shared fixtures."""

import json
from unittest.mock import MagicMock

import pytest

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"


@pytest.fixture
def mock_credentials(tmp_path):
    """Create a mock credentials file."""
    creds = {
        "installed": {
            "client_id": "test-client-id.apps.googleusercontent.com",
            "client_secret": "test-client-secret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }
    creds_path = tmp_path / "credentials.json"
    with open(creds_path, "w") as f:
        json.dump(creds, f)
    return creds_path


@pytest.fixture
def mock_token(tmp_path):
    """Create a mock token file with the spreadsheets scope."""
    token = {
        "token": "test-access-token",
        "refresh_token": "test-refresh-token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "test-client-id.apps.googleusercontent.com",
        "client_secret": "test-client-secret",
        "scopes": [SHEETS_SCOPE],
        "type": "Bearer",
        "expiry": "2099-01-01T00:00:00Z",
    }
    token_path = tmp_path / "token.json"
    with open(token_path, "w") as f:
        json.dump(token, f)
    return token_path


@pytest.fixture
def fetched_token():
    """Token response as returned by Authlib after a code exchange."""
    return {
        "access_token": "fresh-access-token",
        "refresh_token": "fresh-refresh-token",
        "token_type": "Bearer",
        "expires_at": 4070908800,
        "scope": SHEETS_SCOPE,
    }


@pytest.fixture
def sheets_service():
    """Mock Sheets v4 service with canned create/batchUpdate responses."""
    service = MagicMock()
    spreadsheets = service.spreadsheets.return_value
    spreadsheets.create.return_value.execute.return_value = {
        "spreadsheetId": "sheet-123",
        "spreadsheetUrl": "https://docs.google.com/spreadsheets/d/sheet-123/edit",
        "properties": {"title": "Summary"},
        "sheets": [
            {
                "properties": {
                    "sheetId": 0,
                    "title": "Sheet1",
                    "index": 0,
                    "gridProperties": {"rowCount": 1000, "columnCount": 26},
                }
            }
        ],
    }
    spreadsheets.values.return_value.batchUpdate.return_value.execute.return_value = {
        "spreadsheetId": "sheet-123",
        "totalUpdatedRows": 2,
        "totalUpdatedColumns": 2,
        "totalUpdatedCells": 4,
        "totalUpdatedSheets": 1,
    }
    return service
