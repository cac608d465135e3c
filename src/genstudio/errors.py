"""Application-level exception types for the generation studio."""

from __future__ import annotations


class StudioError(Exception):
    """Base exception for the generation studio."""

    retryable = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        return self.message or "Something went wrong. Please try again."


class ConfigurationError(StudioError):
    """Raised when settings are missing or invalid."""


class ValidationError(StudioError):
    """Raised when required inputs are missing; no request is sent."""


class AuthError(StudioError):
    """Raised on HTTP 401/403 or when no credential is available."""

    def __init__(self, message: str = "", *, status: int = 401) -> None:
        super().__init__(message)
        self.status = status

    @property
    def user_message(self) -> str:
        if self.status == 403:
            return "You don't have permission to perform this action."
        return "Your session has expired. Please sign in again."


class RateLimitError(StudioError):
    """Raised on HTTP 429."""

    retryable = True

    @property
    def user_message(self) -> str:
        return "Too many requests. Please wait a moment and try again."


class ServerError(StudioError):
    """Raised on HTTP >= 500 or an error envelope."""

    retryable = True

    @property
    def user_message(self) -> str:
        detail = f" ({self.message})" if self.message else ""
        return f"The generation service had a problem{detail}. Please try again."


class NetworkError(StudioError):
    """Raised on transport failures and timeouts."""

    retryable = True

    @property
    def user_message(self) -> str:
        return "Could not reach the generation service. Check your connection and try again."


class ContentError(ServerError):
    """Raised when a success envelope is missing expected fields."""

    @property
    def user_message(self) -> str:
        return "The generation service returned an incomplete response. Please try again."


class RequestError(StudioError):
    """Raised on other 4xx responses."""

    def __init__(self, message: str = "", *, status: int = 400) -> None:
        super().__init__(message)
        self.status = status


def classify_status(status: int, message: str = "") -> StudioError:
    """Map an HTTP error status to an exception instance."""

    if status in (401, 403):
        return AuthError(message, status=status)
    if status == 429:
        return RateLimitError(message)
    if status >= 500:
        return ServerError(message)
    return RequestError(message or f"HTTP {status}", status=status)
