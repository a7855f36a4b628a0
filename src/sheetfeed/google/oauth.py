"""User OAuth for private spreadsheets, using Authlib.

The consent flow is copy/paste: the user opens the authorization URL, grants
access, and pastes the redirect URL back. The resulting token is kept in the
Google "authorized user" JSON format (google/token.json) so google-auth tools
can read it too, and is refreshed through Authlib whenever a feed request
needs a bearer token after expiry.
"""

import json
import logging
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import requests
from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error

from sheetfeed.config import GOOGLE_CREDENTIALS, GOOGLE_TOKEN
from sheetfeed.google.exceptions import (
    CredentialsNotFoundError,
    ScopeMismatchError,
    TokenError,
)

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"

# Out-of-band style redirect; the user pastes the resulting URL back
REDIRECT_URI = "http://localhost:0"

SCOPES = {
    "feeds": "https://spreadsheets.google.com/feeds",
    "sheets": "https://www.googleapis.com/auth/spreadsheets",
    "sheets_readonly": "https://www.googleapis.com/auth/spreadsheets.readonly",
    "drive_readonly": "https://www.googleapis.com/auth/drive.readonly",
}

DEFAULT_SCOPES = ["feeds"]


def resolve_scopes(scopes: list[str]) -> list[str]:
    """Expand short scope names ("feeds") to scope URLs; URLs pass through."""
    resolved = []
    for scope in scopes:
        if scope.startswith("https://"):
            resolved.append(scope)
            continue
        try:
            resolved.append(SCOPES[scope])
        except KeyError:
            raise ValueError(
                f"Unknown scope: {scope}. Use a full URL or one of: {', '.join(SCOPES)}"
            ) from None
    return resolved


def _expiry_to_timestamp(expiry: Any) -> float | None:
    if isinstance(expiry, str):
        return datetime.fromisoformat(expiry.replace("Z", "+00:00")).timestamp()
    return expiry


def _timestamp_to_expiry(expires_at: float | None) -> str | None:
    if not expires_at:
        return None
    return datetime.fromtimestamp(expires_at, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def token_from_file(data: dict[str, Any]) -> dict[str, Any]:
    """Authorized-user JSON to an Authlib token dict."""
    return {
        "access_token": data.get("token"),
        "refresh_token": data.get("refresh_token"),
        "token_type": data.get("type", "Bearer"),
        "expires_at": _expiry_to_timestamp(data.get("expiry")),
        "scope": " ".join(data.get("scopes", [])),
    }


def token_to_file(token: dict[str, Any], client_id: str, client_secret: str) -> dict[str, Any]:
    """Authlib token dict to authorized-user JSON."""
    return {
        "token": token["access_token"],
        "refresh_token": token.get("refresh_token"),
        "token_uri": TOKEN_URL,
        "client_id": client_id,
        "client_secret": client_secret,
        "scopes": sorted(token.get("scope", "").split()),
        "type": token.get("token_type", "Bearer"),
        "expiry": _timestamp_to_expiry(token.get("expires_at")),
    }


class GoogleOAuth:
    """Bearer tokens for the spreadsheets feeds from a user's consent.

    Example:
        >>> auth = GoogleOAuth()
        >>> if not auth.is_authorized():
        ...     print(f"Visit: {auth.get_authorization_url()}")
        ...     auth.fetch_token(input("Paste redirect URL: "))
        >>> client = SheetsClient(auth=auth)
    """

    def __init__(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_path: str | Path | None = None,
        credentials_path: str | Path | None = None,
    ):
        """Set up the OAuth session, loading a stored token if one fits.

        Args:
            scopes: Scope names or URLs. Defaults to ["feeds"].
            client_id: OAuth client ID; read from the credentials file when omitted.
            client_secret: OAuth client secret; read from the credentials file when omitted.
            token_path: Token file. Defaults to google/token.json.
            credentials_path: Client credentials file. Defaults to google/credentials.json.

        Raises:
            ValueError: If a scope name is unknown or the credentials file is malformed.
            CredentialsNotFoundError: If client credentials are needed and missing.
        """
        self.scopes = resolve_scopes(scopes or DEFAULT_SCOPES)
        self.token_path = Path(token_path) if token_path else GOOGLE_TOKEN
        self.credentials_path = Path(credentials_path) if credentials_path else GOOGLE_CREDENTIALS

        if not (client_id and client_secret):
            client_id, client_secret = self._read_client_secrets()
        self.client_id = client_id
        self.client_secret = client_secret

        self.session = OAuth2Session(
            client_id=client_id,
            client_secret=client_secret,
            scope=" ".join(self.scopes),
            redirect_uri=REDIRECT_URI,
            token=self._read_token(),
            token_endpoint=TOKEN_URL,
            token_endpoint_auth_method="client_secret_post",
            update_token=self._write_token,
        )

    def _read_client_secrets(self) -> tuple[str, str]:
        if not self.credentials_path.exists():
            raise CredentialsNotFoundError(str(self.credentials_path))

        with open(self.credentials_path) as f:
            secrets = json.load(f)

        app = secrets.get("installed") or secrets.get("web")
        if app is None:
            raise ValueError("Invalid credentials.json format. Expected 'installed' or 'web' key.")
        return app["client_id"], app["client_secret"]

    def _missing_scopes(self, granted: str) -> set[str]:
        return set(self.scopes) - set(granted.split())

    def _read_token(self) -> dict[str, Any] | None:
        """Stored token, or None when absent, unreadable or under-scoped."""
        if not self.token_path.exists():
            logger.info(f"No token at {self.token_path}")
            return None

        try:
            with open(self.token_path) as f:
                token = token_from_file(json.load(f))
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logger.error(f"Ignoring unreadable token file {self.token_path}: {e}")
            return None

        missing = self._missing_scopes(token["scope"])
        if missing:
            logger.warning(f"Stored token lacks scopes {missing}; authorize again")
            return None
        return token

    def _write_token(
        self,
        token: dict[str, Any],
        refresh_token: str | None = None,
        access_token: str | None = None,
    ):
        """Store a new or refreshed token (Authlib update_token hook)."""
        token = dict(token)
        if access_token:
            token["access_token"] = access_token
        # Google omits the refresh token on refresh responses
        if not token.get("refresh_token"):
            token["refresh_token"] = refresh_token or (self.session.token or {}).get(
                "refresh_token"
            )

        missing = self._missing_scopes(token.get("scope", ""))
        if missing:
            raise ScopeMismatchError(missing)

        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_path, "w") as f:
            json.dump(token_to_file(token, self.client_id, self.client_secret), f, indent=2)
        logger.info(f"Saved token to {self.token_path}")

    @property
    def token(self) -> dict[str, Any] | None:
        return self.session.token or None

    def is_authorized(self) -> bool:
        """True when a token carrying every required scope is loaded."""
        return self.token is not None and not self._missing_scopes(self.token.get("scope", ""))

    def get_authorization_url(self) -> str:
        """URL the user visits to grant access; offline so a refresh token comes back."""
        url, _state = self.session.create_authorization_url(
            AUTHORIZE_URL,
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        return url

    def fetch_token(self, authorization_response: str) -> dict[str, Any]:
        """Exchange the pasted redirect URL for a token and store it."""
        token = self.session.fetch_token(
            TOKEN_URL,
            authorization_response=authorization_response,
            client_secret=self.client_secret,
        )
        self._write_token(token)
        return token

    def _refresh_if_expired(self) -> None:
        expires_at = self.token.get("expires_at")
        if not expires_at or expires_at > time.time():
            return
        logger.info("Access token expired; refreshing")
        try:
            self.session.refresh_token(TOKEN_URL, refresh_token=self.token.get("refresh_token"))
        except OAuth2Error as e:
            raise TokenError(f"Failed to refresh token: {e}") from e

    def get_access_token(self) -> str:
        """Bearer token for feed requests, refreshed first if it has expired.

        Raises:
            TokenError: If not authorized or the refresh fails.
        """
        if not self.is_authorized():
            raise TokenError(
                "Not authorized for the spreadsheets feeds; run 'sheetfeed google login'"
            )
        self._refresh_if_expired()
        return self.token["access_token"]

    def revoke_token(self):
        """Revoke the token with Google and delete the token file."""
        if self.token is None:
            logger.warning("No token to revoke")
            return

        try:
            self.session.post(REVOKE_URL, params={"token": self.token["access_token"]})
        except requests.RequestException as e:
            logger.warning(f"Remote revoke failed, removing local token anyway: {e}")

        self.token_path.unlink(missing_ok=True)
        logger.info(f"Revoked token and removed {self.token_path}")

    def get_token_info(self) -> dict[str, Any]:
        """Token status, scopes and time to expiry."""
        if self.token is None:
            return {"status": "no_token"}

        expires_at = self.token.get("expires_at")
        remaining = expires_at - time.time() if expires_at else None
        return {
            "status": "expired" if remaining is not None and remaining < 0 else "valid",
            "scopes": self.token.get("scope", "").split(),
            "expires_in": (
                "unknown" if remaining is None else str(timedelta(seconds=max(0, int(remaining))))
            ),
            "has_refresh_token": bool(self.token.get("refresh_token")),
        }
