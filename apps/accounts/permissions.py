"""
Role-based permission classes shared by the billing endpoints.
"""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """
    Allow access only to office administrators.

    Usage:
        @permission_classes([IsAuthenticated, IsAdminRole])
        def bill_stats(request):
            ...
    """

    message = 'Access denied. Required role: admin'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)
