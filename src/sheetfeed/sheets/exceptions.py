"""Spreadsheet feed exceptions."""

ACCESS_GUIDANCE = (
    "Are you sure you have permission to access this Sheet?\n"
    'If this Sheet is supposed to be public, make sure it is "published to the web", '
    'which is NOT the same as "public on the web".'
)


class SheetsError(Exception):
    """Base exception for spreadsheet feed errors."""

    pass


class LimitsError(SheetsError, ValueError):
    """Raised when row/column limits are invalid or inconsistent."""

    pass


class CellRangeError(SheetsError, ValueError):
    """Raised when a cell range expression cannot be parsed."""

    pass


class SheetsAPIError(SheetsError):
    """Raised when the feed request fails or returns an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class FeedAccessError(SheetsAPIError):
    """Raised when the service answers with something other than the expected feed."""

    def __init__(self, what: str, status_code: int, content_type: str):
        self.content_type = content_type
        super().__init__(
            f"Cannot access this sheet via {what}.\n"
            f"{ACCESS_GUIDANCE}\n"
            f"status_code: {status_code}\n"
            f"content-type: {content_type}",
            status_code=status_code,
        )


class UnsupportedSheetError(SheetsError):
    """Raised when a worksheet lacks the link a consumption path needs."""

    pass


class WorksheetNotFoundError(SheetsError, KeyError):
    """Raised when a worksheet index or title does not match the spreadsheet."""

    def __init__(self, ws, available: list[str]):
        self.ws = ws
        self.available = available
        super().__init__(f"Worksheet {ws!r} not found. Available worksheets: {available}")

    def __str__(self) -> str:
        return self.args[0]
