"""API views for user management."""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.notifications.services import send_welcome_email
from apps.users.models import CustomUser
from apps.users.serializers import UserSerializer
from .permissions import IsAdminOrSelf, IsAdminRole
from .serializers import DUPLICATE_EMAIL, UserCreateSerializer, UserUpdateSerializer

logger = logging.getLogger(__name__)


def _error(message: str, http_status: int, details=None) -> Response:
    payload = {"success": False, "message": message}
    if details:
        payload["details"] = details
    return Response(payload, status=http_status)


class UserViewSet(viewsets.ModelViewSet):
    """
    Account management for admins.

    Endpoints:
    - GET /api/v1/users/ - list every user, sorted by name (admin)
    - POST /api/v1/users/ - create a user and send the welcome email (admin)
    - GET /api/v1/users/{id}/ - user details (admin or the user)
    - PATCH /api/v1/users/{id}/ - update name, email, password; role for admins only
    - DELETE /api/v1/users/{id}/ - delete a user (admin)
    """

    queryset = CustomUser.objects.order_by("name", "email")
    serializer_class = UserSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in ("list", "create", "destroy"):
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated(), IsAdminOrSelf()]

    def get_serializer_class(self) -> type:  # type: ignore
        if self.action == "create":
            return UserCreateSerializer
        if self.action == "partial_update":
            return UserUpdateSerializer
        return UserSerializer

    def _lookup(self, pk) -> CustomUser | None:
        try:
            user = self.get_queryset().get(pk=pk)
        except (CustomUser.DoesNotExist, ValueError):
            return None
        self.check_object_permissions(self.request, user)
        return user

    def list(self, request, *args, **kwargs):  # type: ignore
        data = UserSerializer(self.get_queryset(), many=True).data
        return Response({"success": True, "count": len(data), "data": data})

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = UserCreateSerializer(data=request.data)
        if not serializer.is_valid():
            message = "Please provide all required fields"
            if DUPLICATE_EMAIL in serializer.errors.get("email", []):
                message = DUPLICATE_EMAIL
            return _error(message, status.HTTP_400_BAD_REQUEST, serializer.errors)

        user = serializer.save()
        logger.info(f"User {user.pk} ({user.role}) created by {request.user.pk}")
        send_welcome_email(user)

        return Response(
            {
                "success": True,
                "message": "User created successfully",
                "data": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None, *args, **kwargs):  # type: ignore
        user = self._lookup(pk)
        if user is None:
            return _error("User not found", status.HTTP_404_NOT_FOUND)
        return Response({"success": True, "data": UserSerializer(user).data})

    def partial_update(self, request, pk=None, *args, **kwargs):  # type: ignore
        user = self._lookup(pk)
        if user is None:
            return _error("User not found", status.HTTP_404_NOT_FOUND)

        serializer = UserUpdateSerializer(
            user,
            data=request.data,
            partial=True,
            context={"allow_role_change": request.user.is_admin()},
        )
        if not serializer.is_valid():
            message = "Invalid user data"
            if DUPLICATE_EMAIL in serializer.errors.get("email", []):
                message = DUPLICATE_EMAIL
            return _error(message, status.HTTP_400_BAD_REQUEST, serializer.errors)

        user = serializer.save()
        logger.info(f"User {user.pk} updated by {request.user.pk}")
        return Response(
            {
                "success": True,
                "message": "User updated successfully",
                "data": UserSerializer(user).data,
            }
        )

    def destroy(self, request, pk=None, *args, **kwargs):  # type: ignore
        user = self._lookup(pk)
        if user is None:
            return _error("User not found", status.HTTP_404_NOT_FOUND)

        user_id = user.pk
        user.delete()
        logger.info(f"User {user_id} deleted by {request.user.pk}")
        return Response({"success": True, "message": "User deleted successfully"})
