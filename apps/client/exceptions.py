"""
Errors raised by the API client.

Every failure the server reports comes back as an ApiClientError subclass
carrying the HTTP status, the server's ``message`` and its field ``errors``.
"""


class ApiClientError(Exception):
    """Base exception for all API client errors."""

    def __init__(self, message, *, status=None, errors=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.errors = errors or {}


class AuthExpiredError(ApiClientError):
    """The session is gone; the user has to log in again."""
    pass


class AuthInvalidError(ApiClientError):
    """Credentials were rejected (e.g. wrong password). Never refreshed."""
    pass


class AuthorizationDeniedError(ApiClientError):
    """Authenticated, but not allowed to do this (HTTP 403)."""
    pass


class ApiRequestError(ApiClientError):
    """Any other 4xx/5xx response."""
    pass


class ApiConnectionError(ApiClientError):
    """The server could not be reached or did not answer in time."""
    pass
