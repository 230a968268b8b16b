from enum import Enum


class InvalidAmountError(ValueError):
    """Amount is non-numeric or not a positive whole number."""


class InvalidDateError(ValueError):
    """Expense date lies in the future."""


class PersistenceWriteError(Exception):
    """A save to the local store failed. Never fatal."""


class QueryErrorKind(str, Enum):
    TIMEOUT = "timeout"
    AUTH_FAILURE = "auth_failure"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"
    CONTENT_FILTERED = "content_filtered"
    TRUNCATED = "truncated"
    PARSE_FAILURE = "parse_failure"
    NETWORK_FAILURE = "network_failure"


_DEFAULT_MESSAGES = {
    QueryErrorKind.TIMEOUT: "The request timed out. Please try again.",
    QueryErrorKind.AUTH_FAILURE: "The API key is invalid. Please check your settings.",
    QueryErrorKind.PERMISSION_DENIED: "Access was denied. Check the API key's permissions.",
    QueryErrorKind.NOT_FOUND: "The API endpoint was not found. Check the model name.",
    QueryErrorKind.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    QueryErrorKind.SERVER_ERROR: "The AI service had a server error. Please try again later.",
    QueryErrorKind.UNKNOWN: "The AI service returned an unexpected error.",
    QueryErrorKind.CONTENT_FILTERED: "The answer was blocked by the safety filter.",
    QueryErrorKind.TRUNCATED: "The answer was too long and got cut off. Try a simpler question.",
    QueryErrorKind.PARSE_FAILURE: "Could not read the AI service's response.",
    QueryErrorKind.NETWORK_FAILURE: "Network connection failed. Check your internet connection.",
}


class QueryError(Exception):
    """A failed AI query. ``message`` is safe to show to the user."""

    def __init__(self, kind: QueryErrorKind, message: str | None = None, status: int | None = None):
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        self.status = status
        super().__init__(self.message)
