"""CLI for sheetfeed - credentials and quick worksheet dumps.

Usage:
    sheetfeed init                           # Create directories, show setup instructions
    sheetfeed status                         # Show credential and feed settings
    sheetfeed google login                   # Interactive OAuth login
    sheetfeed google status                  # Show OAuth token status
    sheetfeed google revoke                  # Revoke OAuth token
    sheetfeed google import <path>           # Import OAuth credentials
    sheetfeed google import-key <path>       # Import service account key
    sheetfeed worksheets <key>               # List worksheets of a spreadsheet
    sheetfeed cells <key> --range B2:D4      # Reshape a range into a table
    sheetfeed row <key> 1                    # Simplify one row
    sheetfeed csv <key>                      # Whole worksheet via CSV export
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import shutil
import sys
import webbrowser
from pathlib import Path


def cmd_init() -> int:
    """Initialize sheetfeed credential directory structure."""
    from sheetfeed.config import (
        ENV_FILE,
        GOOGLE_CREDENTIALS,
        GOOGLE_DIR,
        GOOGLE_SERVICE_ACCOUNT,
        GOOGLE_TOKEN,
        REPO_ROOT,
        ensure_google_dir,
    )

    print("=" * 60)
    print("SHEETFEED SETUP")
    print("=" * 60)
    print()
    print(f"Repository: {REPO_ROOT}")
    print()

    ensure_google_dir()
    print(f"Created: {GOOGLE_DIR}/")
    print()

    print("Credential locations:")
    print()
    print(f"  {ENV_FILE}")
    print("    Feed settings: SHEETFEED_BASE_URL, SHEETFEED_TIMEOUT, SHEETFEED_RETRIES")
    print()
    print(f"  {GOOGLE_CREDENTIALS}")
    print("    OAuth client credentials from Google Cloud Console")
    print()
    print(f"  {GOOGLE_TOKEN}")
    print("    OAuth tokens (created by 'sheetfeed google login')")
    print()
    print(f"  {GOOGLE_SERVICE_ACCOUNT}")
    print("    Service account key from Google Cloud Console")
    print()

    if not GOOGLE_CREDENTIALS.exists():
        print("For Google OAuth, download credentials from:")
        print("  https://console.cloud.google.com/apis/credentials")
        print(f"  Save as: {GOOGLE_CREDENTIALS}")
        print()

    return 0


def _print_service_account(key_path: Path):
    from sheetfeed.google import GoogleAuthError, GoogleServiceAccount

    try:
        info = GoogleServiceAccount(key_path=key_path).get_info()
    except (GoogleAuthError, ValueError) as e:
        print(f"  service account error:  {e}")
        return
    print(f"  service account email:  {info['email']}")
    print(f"  project:                {info['project_id']}")


def cmd_status() -> int:
    """Show status of configured credentials and feed settings."""
    from sheetfeed.config import GOOGLE_SERVICE_ACCOUNT, get_credential_status

    status = get_credential_status()

    print("=" * 60)
    print("SHEETFEED STATUS")
    print("=" * 60)
    print()
    print(f"Repository: {status['repo_root']}")
    print()
    print("Google:")
    print(f"  credentials.json:       {'[x]' if status['google']['credentials'] else '[ ]'}")
    print(f"  token.json:             {'[x]' if status['google']['token'] else '[ ]'}")
    print(f"  service_account_key:    {'[x]' if status['google']['service_account'] else '[ ]'}")
    if status["google"]["service_account"]:
        _print_service_account(GOOGLE_SERVICE_ACCOUNT)
    print()
    print("Feed:")
    print(f"  base url: {status['feed']['base_url']}")
    print(f"  timeout:  {status['feed']['timeout']}")
    print(f"  retries:  {status['feed']['retries']}")
    print()
    return 0


def google_login(scopes: list[str], no_browser: bool = False) -> int:
    """Interactive Google OAuth login."""
    from sheetfeed.google import CredentialsNotFoundError, GoogleOAuth

    try:
        auth = GoogleOAuth(scopes=scopes)
    except CredentialsNotFoundError as e:
        print(f"\nError: {e}")
        print("Run 'sheetfeed init' for setup instructions")
        return 1

    if auth.is_authorized() and auth.get_token_info()["status"] == "valid":
        print("\nAlready authorized with valid token")
        return google_status(scopes)

    print(f"\nScopes: {', '.join(scopes)}")
    print("After granting access, copy the redirect URL back here.\n")

    url = auth.get_authorization_url()
    print(f"Authorization URL:\n{url}\n")
    if not no_browser:
        webbrowser.open(url)

    redirect_url = input("Paste redirect URL: ").strip()
    if not redirect_url:
        print("No URL provided; aborting.")
        return 1

    auth.fetch_token(redirect_url)
    print("\nToken saved successfully!")
    return google_status(scopes)


def google_status(scopes: list[str]) -> int:
    """Show Google OAuth token status."""
    from sheetfeed.google import CredentialsNotFoundError, GoogleOAuth

    try:
        auth = GoogleOAuth(scopes=scopes)
    except CredentialsNotFoundError as e:
        print(f"Error: {e}")
        print("Run 'sheetfeed init' for setup instructions")
        return 1

    info = auth.get_token_info()
    if info["status"] == "no_token":
        print("No token found - run 'sheetfeed google login'")
        return 1

    print(f"Status     : {info['status']}")
    print(f"Scopes     : {', '.join(info.get('scopes', []))}")
    print(f"Expires in : {info.get('expires_in', 'unknown')}")
    return 0


def google_revoke(scopes: list[str]) -> int:
    """Revoke Google OAuth token."""
    from sheetfeed.google import CredentialsNotFoundError, GoogleOAuth

    try:
        auth = GoogleOAuth(scopes=scopes)
    except CredentialsNotFoundError:
        print("No credentials to revoke")
        return 0

    auth.revoke_token()
    print("Token revoked and local cache cleared")
    return 0


def _import_json(source_path: str, destination: Path, validate) -> int:
    """Validate a JSON credential file and copy it into place."""
    from sheetfeed.config import ensure_google_dir

    source = Path(source_path).expanduser()
    if not source.exists():
        print(f"Error: File not found: {source}")
        return 1

    try:
        with open(source) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        return 1

    problem = validate(data)
    if problem:
        print(f"Error: {problem}")
        return 1

    ensure_google_dir()
    shutil.copy2(source, destination)
    print(f"Imported {source} -> {destination}")
    return 0


def google_import(source_path: str) -> int:
    """Import OAuth client credentials."""
    from sheetfeed.config import GOOGLE_CREDENTIALS

    def validate(data):
        if "installed" not in data and "web" not in data:
            return "Invalid OAuth credentials format; expected 'installed' or 'web' key"
        return None

    result = _import_json(source_path, GOOGLE_CREDENTIALS, validate)
    if result == 0:
        print("Next: Run 'sheetfeed google login' to authorize")
    return result


def google_import_key(source_path: str) -> int:
    """Import a service account key."""
    from sheetfeed.config import GOOGLE_SERVICE_ACCOUNT

    def validate(data):
        if data.get("type") != "service_account":
            return f"Expected type 'service_account', got '{data.get('type')}'"
        return None

    result = _import_json(source_path, GOOGLE_SERVICE_ACCOUNT, validate)
    if result == 0:
        print("Remember to share your spreadsheets with the service account email!")
    return result


def _make_client(auth_mode: str):
    """SheetsClient for the requested auth mode."""
    from sheetfeed.google import GoogleOAuth, GoogleServiceAccount
    from sheetfeed.sheets import SheetsClient

    if auth_mode == "oauth":
        return SheetsClient(auth=GoogleOAuth())
    if auth_mode == "service-account":
        return SheetsClient(auth=GoogleServiceAccount())
    return SheetsClient()


def _write_table(table, out=None) -> None:
    """Write a Table as tab-separated values."""
    writer = csv.writer(out or sys.stdout, delimiter="\t", lineterminator="\n")
    writer.writerow(table.names)
    for row in table.rows:
        writer.writerow(["" if value is None else value for value in row])


def cmd_worksheets(args) -> int:
    with _make_client(args.auth) as client:
        ss = client.register(args.key)
    print(f"{ss.title} ({ss.key})")
    for i, ws in enumerate(ss.worksheets, start=1):
        print(f"  {i}. {ws.title}  [{ws.row_extent} x {ws.col_extent}]")
    return 0


def cmd_cells(args) -> int:
    from sheetfeed.sheets import reshape

    with _make_client(args.auth) as client:
        ws = client.worksheet(args.key, _ws_arg(args.ws))
        if args.range:
            cells = client.get_cells(ws, args.range)
        else:
            cells = client.get_via_cf(ws, return_empty=args.empty)

    table = reshape(cells, header=not args.no_header)
    if not table:
        print(table.message, file=sys.stderr)
        return 1
    _write_table(table.convert() if args.convert else table)
    return 0


def cmd_row(args) -> int:
    from sheetfeed.sheets import simplify

    with _make_client(args.auth) as client:
        ws = client.worksheet(args.key, _ws_arg(args.ws))
        cells = client.get_row(ws, args.row)

    vector = simplify(cells, convert=args.convert, notation=args.notation)
    for key, value in vector:
        print(f"{key}\t{'' if value is None else value}")
    return 0


def cmd_csv(args) -> int:
    with _make_client(args.auth) as client:
        ws = client.worksheet(args.key, _ws_arg(args.ws))
        table = client.get_via_lf(ws) if args.list_feed else client.get_via_csv(ws)
    _write_table(table)
    return 0


def _ws_arg(value: str) -> int | str:
    """Worksheet given as a 1-based index or a title."""
    return int(value) if value.isdigit() else value


def parse_scopes(scope_str: str | None) -> list[str]:
    """Parse comma-separated scopes."""
    if not scope_str:
        return ["feeds"]
    return [s.strip() for s in scope_str.split(",")]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    from sheetfeed.google import GoogleAuthError
    from sheetfeed.sheets import SheetsError

    parser = argparse.ArgumentParser(
        prog="sheetfeed",
        description="Read Google Sheets through the spreadsheets feeds",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show informative messages")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("init", help="Initialize credential directories")
    subparsers.add_parser("status", help="Show credential and feed settings")

    # Google subcommand
    google_parser = subparsers.add_parser("google", help="Google OAuth management")
    google_subparsers = google_parser.add_subparsers(dest="google_command", help="Command")

    login_parser = google_subparsers.add_parser("login", help="Interactive OAuth login")
    login_parser.add_argument("--scopes", type=str, default="feeds", help="Comma-separated scopes")
    login_parser.add_argument(
        "--no-browser", action="store_true", help="Don't open browser automatically"
    )

    status_parser = google_subparsers.add_parser("status", help="Show token status")
    status_parser.add_argument("--scopes", type=str, default="feeds", help="Comma-separated scopes")

    revoke_parser = google_subparsers.add_parser("revoke", help="Revoke token")
    revoke_parser.add_argument("--scopes", type=str, default="feeds", help="Comma-separated scopes")

    import_parser = google_subparsers.add_parser("import", help="Import OAuth credentials")
    import_parser.add_argument("path", help="Path to credentials.json file")

    import_key_parser = google_subparsers.add_parser(
        "import-key", help="Import service account key"
    )
    import_key_parser.add_argument("path", help="Path to service account JSON key file")

    # Data commands
    sheet_options = argparse.ArgumentParser(add_help=False)
    sheet_options.add_argument("key", help="Spreadsheet key or URL")
    sheet_options.add_argument(
        "--auth",
        choices=["oauth", "service-account", "none"],
        default="oauth",
        help="Credentials to use (default: oauth)",
    )
    sheet_options.add_argument("--ws", default="1", help="Worksheet index or title (default: 1)")

    subparsers.add_parser("worksheets", parents=[sheet_options], help="List worksheets")

    cells_parser = subparsers.add_parser(
        "cells", parents=[sheet_options], help="Reshape cells into a table"
    )
    cells_parser.add_argument("--range", help='Cell range, e.g. "B2:D4" or "R2C2:R4C4"')
    cells_parser.add_argument("--no-header", action="store_true", help="First row is data")
    cells_parser.add_argument("--empty", action="store_true", help="Request empty cells too")
    cells_parser.add_argument("--convert", action="store_true", help="Convert column types")

    row_parser = subparsers.add_parser("row", parents=[sheet_options], help="Simplify one row")
    row_parser.add_argument("row", type=int, help="Row number")
    row_parser.add_argument("--notation", choices=["A1", "RC"], default="A1")
    row_parser.add_argument("--no-convert", dest="convert", action="store_false")

    csv_parser = subparsers.add_parser(
        "csv", parents=[sheet_options], help="Whole worksheet as a table"
    )
    csv_parser.add_argument("--list-feed", action="store_true", help="Use the list feed")

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init":
        return cmd_init()

    if args.command == "status":
        return cmd_status()

    if args.command == "google":
        scopes = parse_scopes(getattr(args, "scopes", None))

        if args.google_command == "login":
            return google_login(scopes, args.no_browser)
        elif args.google_command == "status":
            return google_status(scopes)
        elif args.google_command == "revoke":
            return google_revoke(scopes)
        elif args.google_command == "import":
            return google_import(args.path)
        elif args.google_command == "import-key":
            return google_import_key(args.path)
        else:
            google_parser.print_help()
            return 0

    commands = {
        "worksheets": cmd_worksheets,
        "cells": cmd_cells,
        "row": cmd_row,
        "csv": cmd_csv,
    }
    try:
        return commands[args.command](args)
    except (SheetsError, GoogleAuthError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
