"""On-disk OAuth token cache.

Tokens are stored in Google's "authorized user" layout so the file can
also be loaded with `google.oauth2.credentials.Credentials.from_authorized_user_file`:

    {
      "token": "...",
      "refresh_token": "...",
      "token_uri": "https://oauth2.googleapis.com/token",
      "client_id": "...",
      "client_secret": "...",
      "scopes": ["https://www.googleapis.com/auth/spreadsheets"],
      "type": "Bearer",
      "expiry": "2099-01-01T00:00:00Z"
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from csv2sheets.google.exceptions import TokenError

if TYPE_CHECKING:
    from csv2sheets.google.oauth import ClientConfig

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass
class Token:
    """An OAuth access/refresh token pair."""

    access_token: str
    refresh_token: str | None = None
    expiry: datetime | None = None
    scopes: list[str] = field(default_factory=list)
    token_type: str = "Bearer"

    @property
    def expires_at(self) -> float | None:
        """Expiry as a POSIX timestamp."""
        return self.expiry.timestamp() if self.expiry else None

    @property
    def expired(self) -> bool:
        if self.expiry is None:
            return False
        return self.expiry <= datetime.now(timezone.utc)

    @classmethod
    def from_authlib(cls, token: dict[str, Any]) -> Token:
        """Convert an Authlib token dict."""
        expires_at = token.get("expires_at")
        expiry = datetime.fromtimestamp(expires_at, timezone.utc) if expires_at else None
        return cls(
            access_token=token["access_token"],
            refresh_token=token.get("refresh_token"),
            expiry=expiry,
            scopes=token.get("scope", "").split(),
            token_type=token.get("token_type", "Bearer"),
        )

    def to_authlib(self) -> dict[str, Any]:
        """Convert to the dict shape Authlib's OAuth2Session expects."""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at,
            "scope": " ".join(self.scopes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        """Parse the authorized-user JSON layout."""
        if not isinstance(data, dict):
            raise TokenError(f"Token must be a JSON object, got {type(data).__name__}")

        access_token = data.get("token")
        if not isinstance(access_token, str) or not access_token:
            raise TokenError("Token is missing the 'token' field")

        scopes = data.get("scopes", [])
        if isinstance(scopes, str):
            scopes = scopes.split()
        if not isinstance(scopes, list) or not all(isinstance(s, str) for s in scopes):
            raise TokenError("Token 'scopes' must be a list of strings")

        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expiry=_parse_expiry(data.get("expiry")),
            scopes=list(scopes),
            token_type=data.get("type", "Bearer"),
        )

    def to_dict(self, client: ClientConfig | None = None) -> dict[str, Any]:
        """Render the authorized-user JSON layout."""
        data: dict[str, Any] = {
            "token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_uri": client.token_uri if client else DEFAULT_TOKEN_URI,
            "scopes": list(self.scopes),
            "type": self.token_type,
            "expiry": _format_expiry(self.expiry),
        }
        if client:
            data["client_id"] = client.client_id
            data["client_secret"] = client.client_secret
        return data


def _parse_expiry(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, timezone.utc)
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise TokenError(f"Invalid token expiry {value!r}: {e}") from e
    # google-auth writes naive UTC timestamps
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _format_expiry(expiry: datetime | None) -> str | None:
    if expiry is None:
        return None
    return expiry.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def read_token(path: str | Path) -> Token:
    """Load a cached token.

    Args:
        path: Token file path.

    Returns:
        The cached Token.

    Raises:
        TokenError: If the file is missing, unreadable, not JSON or not a token.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise TokenError(f"No cached token at {path}") from e
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TokenError(f"Unable to read token from {path}: {e}") from e

    return Token.from_dict(data)


def write_token(path: str | Path, token: Token, client: ClientConfig | None = None) -> None:
    """Save a token, replacing any previous one.

    The file is created owner read/write only.

    Args:
        path: Token file path.
        token: Token to persist.
        client: Client credentials stored alongside the token, if given.

    Raises:
        TokenError: If the file cannot be written.
    """
    path = Path(path)
    logger.info(f"Saving credential file to: {path}")
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(token.to_dict(client), f, indent=2)
        os.chmod(path, 0o600)
    except OSError as e:
        raise TokenError(f"Unable to cache oauth token at {path}: {e}") from e
