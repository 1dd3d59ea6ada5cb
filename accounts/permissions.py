from rest_framework.permissions import BasePermission

from .access_policy import AccessPolicy


class IsAdminRole(BasePermission):
    """
    Access for administrators only.
    """
    def has_permission(self, request, view):
        return AccessPolicy.is_admin(request.user)
