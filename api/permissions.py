"""
Permissions for the admin API.
"""

from rest_framework.permissions import BasePermission

from api.authentication import AdminPrincipal


class IsAdminToken(BasePermission):
    """Allows access only to requests carrying a valid admin token."""

    message = "Admin authentication required"

    def has_permission(self, request, view):
        return isinstance(request.user, AdminPrincipal)
