"""CLI for csv2sheets - upload a CSV file as a new Google spreadsheet.

Usage:
    csv2sheets                             # Same as `csv2sheets upload`
    csv2sheets upload --csv data.csv       # Create a spreadsheet from a CSV file
    csv2sheets login                       # Interactive OAuth login
    csv2sheets status                      # Show files and OAuth token status
    csv2sheets revoke                      # Revoke OAuth token

Settings come from flags, then CSV2SHEETS_* environment variables (or a
.env file in the working directory), then defaults.

Exit codes:
    0  success
    1  unexpected error
    3  credentials file missing or malformed
    4  authorization or token failure
    5  CSV file missing or malformed
    6  Google Sheets API failure
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from csv2sheets.config import UploadSettings
from csv2sheets.csvfile import CSVLoadError
from csv2sheets.google import (
    CredentialsFormatError,
    CredentialsNotFoundError,
    GoogleAuthError,
    GoogleOAuth,
    TokenError,
    read_token,
)
from csv2sheets.sheets import SheetsAPIError

logger = logging.getLogger("csv2sheets")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CREDENTIALS = 3
EXIT_AUTH = 4
EXIT_CSV = 5
EXIT_API = 6


def exit_code_for(error: Exception) -> int:
    """Map a failure to its process exit code."""
    if isinstance(error, (CredentialsNotFoundError, CredentialsFormatError)):
        return EXIT_CREDENTIALS
    if isinstance(error, GoogleAuthError):
        return EXIT_AUTH
    if isinstance(error, CSVLoadError):
        return EXIT_CSV
    if isinstance(error, SheetsAPIError):
        return EXIT_API
    return EXIT_ERROR


def cmd_upload(settings: UploadSettings, open_browser: bool = False) -> int:
    """Upload the CSV file as a new spreadsheet."""
    from csv2sheets.uploader import upload_csv

    result = upload_csv(settings, open_browser=open_browser)
    print(json.dumps(result.response, indent=2))
    return EXIT_OK


def cmd_login(settings: UploadSettings, open_browser: bool = False) -> int:
    """Interactive Google OAuth login."""
    print("=" * 60)
    print("CSV2SHEETS GOOGLE LOGIN")
    print("=" * 60)

    auth = _make_auth(settings)

    info = auth.get_token_info()
    if auth.is_authorized() and info["status"] == "valid":
        print("\nAlready authorized with valid token")
        return _print_token_status(auth)

    print(f"\nScopes: {', '.join(settings.scopes)}\n")
    auth.authorize(open_browser=open_browser)
    print("\nToken saved successfully!")
    return _print_token_status(auth)


def cmd_status(settings: UploadSettings) -> int:
    """Show configured files and OAuth token status."""
    print("Files:")
    for name, entry in settings.status().items():
        mark = "[x]" if entry["exists"] else "[ ]"
        print(f"  {mark} {name:<12} {entry['path']}")
    print()

    try:
        auth = _make_auth(settings)
    except (CredentialsNotFoundError, CredentialsFormatError) as e:
        print(f"Error: {e}")
        return _print_cached_token_status(settings.token_path)
    return _print_token_status(auth)


def cmd_revoke(settings: UploadSettings) -> int:
    """Revoke Google OAuth token."""
    try:
        auth = _make_auth(settings)
    except CredentialsNotFoundError:
        print("No credentials to revoke")
        return EXIT_OK

    auth.revoke_token()
    print("Token revoked and local cache cleared")
    return EXIT_OK


def _make_auth(settings: UploadSettings) -> GoogleOAuth:
    return GoogleOAuth(
        scopes=settings.scopes,
        credentials_path=settings.credentials_path,
        token_path=settings.token_path,
    )


def _print_token_status(auth: GoogleOAuth) -> int:
    info = auth.get_token_info()

    if info["status"] == "no_token":
        print("No token found - run 'csv2sheets login'")
        return EXIT_AUTH

    print(f"Status     : {info['status']}")
    print(f"Scopes     : {', '.join(info.get('scopes', []))}")
    print(f"Expires in : {info.get('expires_in', 'unknown')}")
    print(f"Refreshed  : {info.get('last_refresh') or 'never'}")
    return EXIT_OK


def _print_cached_token_status(token_path: Path) -> int:
    """Report the token file without a client to refresh it."""
    try:
        token = read_token(token_path)
    except TokenError:
        print("No token found - run 'csv2sheets login'")
        return EXIT_AUTH

    print(f"Status     : {'expired' if token.expired else 'valid'}")
    print(f"Scopes     : {', '.join(token.scopes)}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Shared flags belong to the top-level parser and go before the command:
    `csv2sheets --token t.json upload --csv data.csv`.
    """
    parser = argparse.ArgumentParser(
        prog="csv2sheets",
        description="Upload a CSV file as a new Google spreadsheet",
    )
    parser.add_argument(
        "--credentials",
        type=Path,
        help="OAuth client secret file (default: credentials.json)",
    )
    parser.add_argument(
        "--token",
        type=Path,
        help="Cached OAuth token file (default: token.json)",
    )
    parser.add_argument(
        "--open-browser",
        action="store_true",
        help="Open the authorization URL in the default browser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # upload command
    upload_parser = subparsers.add_parser("upload", help="Create a spreadsheet from a CSV file")
    upload_parser.add_argument("--csv", type=Path, help="CSV file (default: file.csv)")
    upload_parser.add_argument("--title", help="Spreadsheet title (default: Summary)")
    upload_parser.add_argument(
        "--range",
        dest="target_range",
        help="Top-left cell of the written values (default: A1)",
    )

    subparsers.add_parser("login", help="Interactive OAuth login")
    subparsers.add_parser("status", help="Show file and token status")
    subparsers.add_parser("revoke", help="Revoke OAuth token")

    return parser


def settings_from_args(args: argparse.Namespace) -> UploadSettings:
    """Overlay command-line flags on environment settings."""
    settings = UploadSettings.from_env()
    if args.credentials:
        settings.credentials_path = args.credentials
    if args.token:
        settings.token_path = args.token
    if getattr(args, "csv", None):
        settings.csv_path = args.csv
    if getattr(args, "title", None):
        settings.title = args.title
    if getattr(args, "target_range", None):
        settings.target_range = args.target_range
    return settings


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    configure_logging(args.verbose)
    settings = settings_from_args(args)

    try:
        if args.command in (None, "upload"):
            return cmd_upload(settings, open_browser=args.open_browser)
        if args.command == "login":
            return cmd_login(settings, open_browser=args.open_browser)
        if args.command == "status":
            return cmd_status(settings)
        if args.command == "revoke":
            return cmd_revoke(settings)
    except (GoogleAuthError, CSVLoadError, SheetsAPIError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return exit_code_for(e)

    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
