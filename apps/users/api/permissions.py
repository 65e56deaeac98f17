"""Permission classes for the user management API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def _is_admin(user) -> bool:
    return bool(user and user.is_authenticated and hasattr(user, "is_admin") and user.is_admin())


class IsAdminRole(permissions.BasePermission):
    """Only users with role='admin' may pass."""

    message = "Admin access required"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return _is_admin(request.user)


class IsAdminOrSelf(permissions.BasePermission):
    """
    Object-level permission: admins may act on any account, everyone else
    only on their own.
    """

    message = "Not authorized to access this user"

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if _is_admin(user):
            return True
        return obj.pk == user.pk
