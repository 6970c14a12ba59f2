"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
)
from .user_authentication import authenticate_user
from .token_management import issue_tokens, refresh_session

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidTokenError',
    # Services
    'authenticate_user',
    'issue_tokens',
    'refresh_session',
]
