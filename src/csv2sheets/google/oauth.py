"""Google OAuth management using Authlib.

This module provides OAuth 2.0 authentication for Google APIs with:
- Client secret loading (installed and web app formats)
- Interactive authorization-code flow with a pluggable code prompt
- On-disk token caching and automatic refresh
- Google API service creation (Sheets, Drive, etc.)

Default file locations are relative to the working directory:
    credentials.json - OAuth client credentials
    token.json       - OAuth tokens
"""

from __future__ import annotations

import json
import logging
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from authlib.common.errors import AuthlibBaseError
from authlib.integrations.requests_client import OAuth2Session
from google.oauth2.credentials import Credentials as GoogleCredentials
from googleapiclient.discovery import build
from requests import RequestException

from csv2sheets.config import DEFAULT_CREDENTIALS, DEFAULT_SCOPES, DEFAULT_TOKEN
from csv2sheets.google.exceptions import (
    AuthorizationError,
    CredentialsFormatError,
    CredentialsNotFoundError,
    ScopeMismatchError,
    TokenError,
)
from csv2sheets.google.token import Token, read_token, write_token

logger = logging.getLogger(__name__)


# Common Google OAuth scopes
SCOPES = {
    "sheets": "https://www.googleapis.com/auth/spreadsheets",
    "sheets_readonly": "https://www.googleapis.com/auth/spreadsheets.readonly",
    "drive": "https://www.googleapis.com/auth/drive",
    "drive_file": "https://www.googleapis.com/auth/drive.file",
}

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
DEFAULT_REDIRECT_URI = "http://localhost"


@dataclass
class ClientConfig:
    """OAuth client credentials from a client secret file."""

    client_id: str
    client_secret: str
    auth_uri: str = AUTHORIZE_URL
    token_uri: str = TOKEN_URL
    redirect_uri: str = DEFAULT_REDIRECT_URI


def load_client_config(path: str | Path) -> ClientConfig:
    """Load OAuth client credentials from file.

    Args:
        path: Path to credentials.json downloaded from Google Cloud Console.

    Returns:
        Parsed ClientConfig.

    Raises:
        CredentialsNotFoundError: If the file does not exist.
        CredentialsFormatError: If the file is not a valid client secret document.
    """
    path = Path(path)
    if not path.exists():
        raise CredentialsNotFoundError(str(path))

    try:
        with open(path) as f:
            creds = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CredentialsFormatError(str(path), str(e)) from e

    if not isinstance(creds, dict):
        raise CredentialsFormatError(str(path), "expected a JSON object")

    # Handle both web and installed app credential formats
    if "installed" in creds:
        app_creds = creds["installed"]
    elif "web" in creds:
        app_creds = creds["web"]
    else:
        raise CredentialsFormatError(str(path), "expected 'installed' or 'web' key")

    if not isinstance(app_creds, dict):
        raise CredentialsFormatError(str(path), "client section must be an object")

    missing = [key for key in ("client_id", "client_secret") if not app_creds.get(key)]
    if missing:
        raise CredentialsFormatError(str(path), f"missing {', '.join(missing)}")

    redirect_uris = app_creds.get("redirect_uris") or [DEFAULT_REDIRECT_URI]
    return ClientConfig(
        client_id=app_creds["client_id"],
        client_secret=app_creds["client_secret"],
        auth_uri=app_creds.get("auth_uri", AUTHORIZE_URL),
        token_uri=app_creds.get("token_uri", TOKEN_URL),
        redirect_uri=redirect_uris[0],
    )


def resolve_scopes(scopes: list[str]) -> list[str]:
    """Resolve scope names to full URLs."""
    resolved = []
    for scope in scopes:
        if scope.startswith("https://"):
            resolved.append(scope)
        elif scope in SCOPES:
            resolved.append(SCOPES[scope])
        else:
            raise ValueError(
                f"Unknown scope: {scope}. Use full URL or one of: {list(SCOPES.keys())}"
            )
    return resolved


class GoogleOAuth:
    """Google OAuth management using Authlib.

    Handles the OAuth 2.0 authorization-code flow, token caching and
    Google API service creation.

    Example:
        >>> auth = GoogleOAuth(scopes=["sheets"])
        >>> service = auth.obtain_service("sheets", "v4")

    `obtain_service` reuses the cached token when it is usable and
    otherwise prints an authorization URL and reads the code from `prompt`
    (standard input by default).
    """

    def __init__(
        self,
        scopes: list[str] | None = None,
        credentials_path: str | Path | None = None,
        token_path: str | Path | None = None,
        client: ClientConfig | None = None,
    ):
        """Initialize Google OAuth.

        Args:
            scopes: List of scope names (e.g., ["sheets"]) or full URLs.
                   If None, defaults to ["sheets"].
            credentials_path: Path to OAuth credentials file. Defaults to ./credentials.json.
            token_path: Path to store/load tokens. Defaults to ./token.json.
            client: Client credentials. Loaded from `credentials_path` if not provided.

        Raises:
            CredentialsNotFoundError: If the credentials file is missing.
            CredentialsFormatError: If the credentials file is malformed.
        """
        self.token_path = Path(token_path) if token_path else DEFAULT_TOKEN
        self.credentials_path = Path(credentials_path) if credentials_path else DEFAULT_CREDENTIALS

        # Resolve scope names to full URLs
        self.required_scopes = resolve_scopes(scopes or list(DEFAULT_SCOPES))

        self.client = client or load_client_config(self.credentials_path)

        cached = self._load_token()
        self.session = OAuth2Session(
            client_id=self.client.client_id,
            client_secret=self.client.client_secret,
            scope=" ".join(self.required_scopes),
            redirect_uri=self.client.redirect_uri,
            token=cached.to_authlib() if cached else None,
            update_token=self._on_token_refresh,
            token_endpoint=self.client.token_uri,
            token_endpoint_auth_method="client_secret_post",
        )

        self._state: str | None = None
        self.last_refresh: datetime | None = None
        self.refresh_count = 0

    def _load_token(self) -> Token | None:
        """Load the cached token, or None if it is absent or unusable."""
        try:
            token = read_token(self.token_path)
            self._check_scopes(token.scopes)
        except TokenError as e:
            # Missing and corrupt token files both mean "authorize again"
            logger.info(f"No usable cached token: {e}")
            return None

        logger.info(f"Loaded token with scopes: {set(token.scopes)}")
        return token

    def _check_scopes(self, scopes: list[str]) -> None:
        missing = set(self.required_scopes) - set(scopes)
        if missing:
            raise ScopeMismatchError(missing)

    def _save_token(self, token: dict[str, Any]) -> Token:
        """Persist an Authlib token dict."""
        # Google omits scope from some responses; it then means "as requested"
        if not token.get("scope"):
            token["scope"] = " ".join(self.required_scopes)

        saved = Token.from_authlib(token)
        self._check_scopes(saved.scopes)
        write_token(self.token_path, saved, self.client)

        self.last_refresh = datetime.now()
        self.refresh_count += 1

        logger.info(f"Token saved with scopes: {set(saved.scopes)}")
        return saved

    def _on_token_refresh(
        self,
        token: dict[str, Any],
        refresh_token: str | None = None,
        access_token: str | None = None,
    ):
        """Save token to storage (Authlib callback)."""
        # Refresh responses usually leave out the refresh token
        if refresh_token and not token.get("refresh_token"):
            token["refresh_token"] = refresh_token
        self._save_token(token)

    def is_authorized(self) -> bool:
        """Check if we have a token with required scopes.

        Returns:
            True if authorized with all required scopes, False otherwise.
        """
        if not self.session.token:
            return False

        token_scopes = set(self.session.token.get("scope", "").split())
        return set(self.required_scopes).issubset(token_scopes)

    def get_authorization_url(self) -> str:
        """Start OAuth authorization flow.

        Returns:
            Authorization URL for user to visit.
        """
        authorization_url, state = self.session.create_authorization_url(
            self.client.auth_uri,
            access_type="offline",
            prompt="consent",
        )

        self._state = state
        return authorization_url

    def fetch_token(self, code: str) -> Token:
        """Exchange an authorization code for a token and cache it.

        Args:
            code: The authorization code, or the full redirect URL carrying it.

        Returns:
            The saved Token.

        Raises:
            AuthorizationError: If the code is empty or the exchange fails.
            TokenError: If the token cannot be saved.
        """
        code = code.strip()
        if not code:
            raise AuthorizationError("No authorization code provided")

        if code.startswith(("http://", "https://")):
            kwargs = {"authorization_response": code, "state": self._state}
        else:
            kwargs = {"code": code}

        try:
            token = self.session.fetch_token(
                self.client.token_uri,
                **kwargs,
            )
        except (AuthlibBaseError, RequestException, ValueError) as e:
            raise AuthorizationError(f"Unable to retrieve token from web: {e}") from e

        saved = self._save_token(dict(token))
        self.session.token = saved.to_authlib()
        return saved

    def authorize(
        self,
        prompt: Callable[[str], str] | None = None,
        output: Callable[[str], Any] | None = None,
        open_browser: bool = False,
    ) -> Token:
        """Run the interactive authorization-code flow.

        Args:
            prompt: Reads one line of user input; receives the prompt text.
                   Defaults to `input`.
            output: Receives status lines meant for the user. Defaults to `print`.
            open_browser: Also open the URL in the default browser.

        Returns:
            The saved Token.
        """
        prompt = prompt or input
        output = output or print

        url = self.get_authorization_url()
        output(
            "Go to the following link in your browser then type the authorization code:\n"
            f"{url}"
        )
        if open_browser:
            webbrowser.open(url)

        try:
            code = prompt("Authorization code: ")
        except (EOFError, KeyboardInterrupt) as e:
            raise AuthorizationError("Unable to read authorization code") from e

        return self.fetch_token(code)

    def get_credentials(self) -> GoogleCredentials:
        """Get Google Credentials object for API client libraries.

        Returns:
            Google Credentials object with current token.

        Raises:
            TokenError: If not authorized or token refresh fails.
        """
        if not self.is_authorized():
            raise TokenError("Not authorized or missing required scopes")

        # Refresh if expired
        expires_at = self.session.token.get("expires_at", 0)
        if expires_at and expires_at < datetime.now().timestamp():
            logger.info("Token expired, refreshing...")
            try:
                self.session.refresh_token(
                    self.client.token_uri,
                    refresh_token=self.session.token.get("refresh_token"),
                )
            except (AuthlibBaseError, RequestException) as e:
                raise TokenError(f"Failed to refresh token: {e}") from e

        return GoogleCredentials(
            token=self.session.token["access_token"],
            refresh_token=self.session.token.get("refresh_token"),
            token_uri=self.client.token_uri,
            client_id=self.client.client_id,
            client_secret=self.client.client_secret,
            scopes=self.required_scopes,
        )

    def build_service(self, service_name: str = "sheets", version: str = "v4"):
        """Build a Google API service with current credentials.

        Args:
            service_name: Name of the service (e.g., 'sheets', 'drive').
            version: API version (e.g., 'v4').

        Returns:
            Google API service object.
        """
        creds = self.get_credentials()
        return build(service_name, version, credentials=creds)

    def obtain_service(
        self,
        service_name: str = "sheets",
        version: str = "v4",
        prompt: Callable[[str], str] | None = None,
        output: Callable[[str], Any] | None = None,
        open_browser: bool = False,
    ):
        """Build an API service, authorizing interactively first if needed."""
        if not self.is_authorized():
            self.authorize(prompt=prompt, output=output, open_browser=open_browser)
        return self.build_service(service_name, version)

    def revoke_token(self):
        """Revoke the current token and clear local storage."""
        if not self.session.token:
            logger.warning("No token to revoke")
            return

        # The revoke endpoint authenticates by the token parameter alone
        try:
            self.session.post(
                REVOKE_URL,
                params={"token": self.session.token["access_token"]},
                withhold_token=True,
            )
        except (AuthlibBaseError, RequestException) as e:
            logger.warning(f"Failed to revoke token remotely: {e}")

        if self.token_path.exists():
            self.token_path.unlink()
        self.session.token = None

        logger.info("Token revoked successfully")

    def get_token_info(self) -> dict[str, Any]:
        """Get information about the current token.

        Returns:
            Dictionary with token status, scopes, expiry, etc.
        """
        if not self.session.token:
            return {"status": "no_token"}

        token = self.session.token
        expires_at = token.get("expires_at", 0)

        if expires_at:
            expires_in = expires_at - datetime.now().timestamp()
            expires_str = str(timedelta(seconds=int(max(0, expires_in))))
            is_expired = expires_at < datetime.now().timestamp()
        else:
            expires_str = "unknown"
            is_expired = False

        return {
            "status": "valid" if not is_expired else "expired",
            "scopes": token.get("scope", "").split(),
            "expires_in": expires_str,
            "has_refresh_token": bool(token.get("refresh_token")),
            "refresh_count": self.refresh_count,
            "last_refresh": self.last_refresh.isoformat() if self.last_refresh else None,
        }
