"""Member directory services."""

from .exceptions import (
    MembersServiceError,
    MemberNotFoundError,
)
from .member_lookup import get_member, format_member_address

__all__ = [
    # Exceptions
    'MembersServiceError',
    'MemberNotFoundError',
    # Services
    'get_member',
    'format_member_address',
]
