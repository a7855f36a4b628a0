"""Google Service Account tokens for the spreadsheets feeds.

Service accounts read spreadsheets without user interaction. The sheet must
be shared with the service account email address.

Example:
    >>> auth = GoogleServiceAccount(key_path="service_account_key.json")
    >>> client = SheetsClient(auth=auth)
"""

import json
import logging
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from sheetfeed.config import GOOGLE_SERVICE_ACCOUNT
from sheetfeed.google.exceptions import CredentialsNotFoundError, GoogleAuthError, TokenError
from sheetfeed.google.oauth import DEFAULT_SCOPES, resolve_scopes

logger = logging.getLogger(__name__)


class GoogleServiceAccount:
    """Service account credentials exposing a bearer token for feed requests."""

    def __init__(
        self,
        key_path: str | Path | None = None,
        scopes: list[str] | None = None,
    ):
        """Initialize service account authentication.

        Args:
            key_path: Service account JSON key. Defaults to google/service_account_key.json.
            scopes: Scope names (e.g., ["feeds"]) or full URLs. Defaults to ["feeds"].

        Raises:
            CredentialsNotFoundError: If key file not found.
            GoogleAuthError: If key file is invalid.
        """
        self.key_path = Path(key_path) if key_path else GOOGLE_SERVICE_ACCOUNT

        if not self.key_path.exists():
            raise CredentialsNotFoundError(str(self.key_path))

        self.scopes = resolve_scopes(scopes or DEFAULT_SCOPES)

        try:
            with open(self.key_path) as f:
                key_data = json.load(f)
        except json.JSONDecodeError as e:
            raise GoogleAuthError(f"Invalid JSON in key file: {e}") from e

        if key_data.get("type") != "service_account":
            raise GoogleAuthError(
                f"Invalid key file: expected type 'service_account', "
                f"got '{key_data.get('type')}'"
            )

        self.client_email = key_data.get("client_email", "")
        self.project_id = key_data.get("project_id", "")

        self._credentials = service_account.Credentials.from_service_account_info(
            key_data,
            scopes=self.scopes,
        )
        logger.info(f"Service account initialized: {self.client_email}")

    def get_access_token(self) -> str:
        """Bearer token for feed requests, refreshed when missing or expired.

        Raises:
            TokenError: If the token cannot be obtained.
        """
        if not self._credentials.valid:
            try:
                self._credentials.refresh(Request())
            except RefreshError as e:
                raise TokenError(f"Failed to obtain service account token: {e}") from e
        return self._credentials.token

    def get_info(self) -> dict:
        """Describe the service account. Share spreadsheets with its email."""
        return {
            "email": self.client_email,
            "project_id": self.project_id,
            "scopes": self.scopes,
            "key_path": str(self.key_path),
        }
