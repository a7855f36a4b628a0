"""Google OAuth and service account token providers for the spreadsheets feeds."""

from sheetfeed.google.exceptions import (
    AuthorizationRequired,
    CredentialsNotFoundError,
    GoogleAuthError,
    ScopeMismatchError,
    TokenError,
)
from sheetfeed.google.oauth import SCOPES, GoogleOAuth, resolve_scopes
from sheetfeed.google.service_account import GoogleServiceAccount

__all__ = [
    "SCOPES",
    "GoogleOAuth",
    "GoogleServiceAccount",
    "resolve_scopes",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "TokenError",
    "ScopeMismatchError",
    "AuthorizationRequired",
]
