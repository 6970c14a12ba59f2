"""
Domain-specific exceptions for the member directory.

Views catch these and convert them to HTTP responses.
"""


class MembersServiceError(Exception):
    """Base exception for member directory errors."""
    pass


class MemberNotFoundError(MembersServiceError):
    """Raised when no active member has the requested Mahal ID."""
    pass
