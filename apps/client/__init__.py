"""
Async client for the KMJ billing API.

Attaches the session's bearer token to every request and recovers from an
expired access token with a single refresh shared by all concurrent callers.
"""

from .exceptions import (
    ApiClientError,
    AuthExpiredError,
    AuthInvalidError,
    AuthorizationDeniedError,
    ApiRequestError,
    ApiConnectionError,
)

from .session import (
    AuthSession,
    TokenStore,
    AuthSessionManager,
)

from .http_client import (
    AuthenticatedClient,
    classify_unauthorized,
)

from .api import BillingAPI


__all__ = [
    # Exceptions
    'ApiClientError',
    'AuthExpiredError',
    'AuthInvalidError',
    'AuthorizationDeniedError',
    'ApiRequestError',
    'ApiConnectionError',

    # Session
    'AuthSession',
    'TokenStore',
    'AuthSessionManager',

    # Client
    'AuthenticatedClient',
    'classify_unauthorized',
    'BillingAPI',
]
