"""Google OAuth authentication and token caching."""

from csv2sheets.google.exceptions import (
    AuthorizationError,
    CredentialsFormatError,
    CredentialsNotFoundError,
    GoogleAuthError,
    ScopeMismatchError,
    TokenError,
)
from csv2sheets.google.oauth import ClientConfig, GoogleOAuth, load_client_config
from csv2sheets.google.token import Token, read_token, write_token

__all__ = [
    "GoogleOAuth",
    "ClientConfig",
    "Token",
    "load_client_config",
    "read_token",
    "write_token",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "CredentialsFormatError",
    "TokenError",
    "ScopeMismatchError",
    "AuthorizationError",
]
