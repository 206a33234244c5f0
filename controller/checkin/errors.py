"""Error taxonomy shared by the check-in controllers."""
from __future__ import annotations

from typing import Optional


class CheckinError(RuntimeError):
    """Base for every failure a controller reports to the UI."""

    category = "error"
    default_message = "Something went wrong. Please try again."

    def __init__(self, user_message: Optional[str] = None, *, log_message: Optional[str] = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(log_message or self.user_message)


class ValidationInputError(CheckinError):
    """Rejected locally, no request was made."""

    category = "validation"
    default_message = "Please check the value and try again."


class NotFoundError(CheckinError):
    category = "not_found"
    default_message = "Invalid registration."


class AuthExpiredError(CheckinError):
    """Session rejected (403) or missing; the only category with teardown."""

    category = "auth_expired"
    default_message = "Session expired. Please sign in again."


class NetworkError(CheckinError):
    """Transport or response parsing failure."""

    category = "network"
    default_message = "Network error. Please try again."


class ServerError(CheckinError):
    """Any other non-2xx answer."""

    category = "server"

    def __init__(
        self,
        user_message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        log_message: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        message = user_message or self.default_message
        super().__init__(message, log_message=log_message or f"HTTP {status_code}: {message}")


__all__ = [
    "CheckinError",
    "ValidationInputError",
    "NotFoundError",
    "AuthExpiredError",
    "NetworkError",
    "ServerError",
]
