"""
Permission classes for the content admin API.
"""
from rest_framework.permissions import BasePermission


class IsContentEditor(BasePermission):
    """Allow access only to staff users (Django's ``is_staff`` flag)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and user.is_staff)
