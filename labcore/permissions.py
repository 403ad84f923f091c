"""
Custom permission classes for role based route gates.
"""
from rest_framework.permissions import BasePermission

from .models import Role


class IsAdminRole(BasePermission):
    """Allow access only to Admin users."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == Role.ADMIN)


class IsClientRole(BasePermission):
    """Allow access only to Client users."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == Role.CLIENT)
