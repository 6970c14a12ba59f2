"""
JWT session service.

Issues access/refresh pairs and rotates them on refresh. The response keys
(``token``/``refreshToken``) are the ones the web and Python clients store.
"""

import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import InvalidTokenError

User = get_user_model()
logger = logging.getLogger(__name__)


def issue_tokens(user) -> dict:
    """Return a fresh ``{token, refreshToken}`` pair for ``user``."""
    refresh = RefreshToken.for_user(user)
    return {
        'token': str(refresh.access_token),
        'refreshToken': str(refresh),
    }


def refresh_session(*, refresh_token: str) -> dict:
    """
    Exchange a refresh token for a new access/refresh pair.

    Both tokens are replaced; the caller must store them together.

    Raises:
        InvalidTokenError: If the token is malformed, expired, or its user
            no longer exists or is inactive.
    """
    if not refresh_token:
        raise InvalidTokenError("Refresh token is required")

    try:
        refresh = RefreshToken(refresh_token)
    except TokenError:
        raise InvalidTokenError("Invalid or expired refresh token")

    user_id = refresh.payload.get(api_settings.USER_ID_CLAIM)
    try:
        user = User.objects.get(id=user_id)
    except (User.DoesNotExist, DjangoValidationError):
        raise InvalidTokenError("Invalid refresh token")

    if not user.is_active:
        raise InvalidTokenError("Invalid refresh token")

    logger.debug("Rotated session tokens for %s", user.member_id)
    return issue_tokens(user)
