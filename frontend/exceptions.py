from typing import List, Optional


class ApiError(Exception):
    """Raised when the library API answers with a non-2xx envelope."""

    def __init__(self, status_code: int, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(message or f"Request failed with status {status_code}")

    @property
    def field_errors(self) -> dict:
        return {error.get("field"): error.get("message") for error in self.errors}


class SessionExpiredError(ApiError):
    """The API rejected the session token; the user has to log in again."""


def describe_error(error: Exception, fallback: str = "Something went wrong. Please try again.") -> str:
    if isinstance(error, ApiError):
        if error.message:
            return error.message
        if error.errors:
            return ", ".join(e.get("message", "") for e in error.errors)
    return fallback
