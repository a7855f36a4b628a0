"""Centralized credential and feed configuration.

Credentials are stored under the sheetfeed repo root:
    .env                            - feed settings (SHEETFEED_*)
    google/credentials.json         - Google OAuth client credentials
    google/token.json               - Google OAuth tokens
    google/service_account_key.json - Google service account key

This module auto-loads the .env file on import, so feed settings and
credential paths are available to every sheetfeed module.
"""

import os
from pathlib import Path

# __file__ is src/sheetfeed/config.py, so 3 levels up
REPO_ROOT = Path(__file__).parent.parent.parent
GOOGLE_DIR = REPO_ROOT / "google"

ENV_FILE = REPO_ROOT / ".env"
GOOGLE_CREDENTIALS = GOOGLE_DIR / "credentials.json"
GOOGLE_TOKEN = GOOGLE_DIR / "token.json"
GOOGLE_SERVICE_ACCOUNT = GOOGLE_DIR / "service_account_key.json"

DEFAULT_BASE_URL = "https://spreadsheets.google.com/feeds"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 2


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from a file.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of loaded variables.
    """
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            # Env vars already set take precedence
            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


def ensure_google_dir() -> Path:
    """Create google credentials directory if it doesn't exist."""
    GOOGLE_DIR.mkdir(parents=True, exist_ok=True)
    return GOOGLE_DIR


def feed_base_url() -> str:
    """Root URL of the spreadsheets feed API."""
    return os.environ.get("SHEETFEED_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def feed_timeout() -> float:
    """HTTP timeout in seconds for feed requests."""
    value = os.environ.get("SHEETFEED_TIMEOUT")
    if not value:
        return DEFAULT_TIMEOUT
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"SHEETFEED_TIMEOUT must be a number, got {value!r}") from e


def feed_retries() -> int:
    """Number of connection retries delegated to the HTTP transport."""
    value = os.environ.get("SHEETFEED_RETRIES")
    if not value:
        return DEFAULT_RETRIES
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"SHEETFEED_RETRIES must be an integer, got {value!r}") from e


def get_credential_status() -> dict:
    """Get status of configured credentials and feed settings.

    Returns:
        Dictionary with credential status.
    """
    return {
        "repo_root": str(REPO_ROOT),
        "env_file": ENV_FILE.exists(),
        "google": {
            "credentials": GOOGLE_CREDENTIALS.exists(),
            "token": GOOGLE_TOKEN.exists(),
            "service_account": GOOGLE_SERVICE_ACCOUNT.exists(),
        },
        "feed": {
            "base_url": feed_base_url(),
            "timeout": os.environ.get("SHEETFEED_TIMEOUT", str(DEFAULT_TIMEOUT)),
            "retries": os.environ.get("SHEETFEED_RETRIES", str(DEFAULT_RETRIES)),
        },
    }


_loaded = _load_env_file(ENV_FILE)
