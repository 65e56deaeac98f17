"""API views for the booking domain."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application.command_handlers import (
    BookingNotFound,
    BookingPermissionDenied,
    Caller,
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    DeleteBookingCommand,
    DeleteBookingHandler,
    GetAvailabilityQuery,
    UpdateBookingCommand,
    UpdateBookingHandler,
)
from .domain.results import Reject
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    BookingUpdateSerializer,
)

def reject_response(result: Reject) -> Response:
    payload = {
        "success": False,
        "code": result.code.value,
        "message": result.message,
    }
    if result.errors:
        payload["details"] = result.errors
    if result.conflicts:
        payload["conflicts"] = [str(pk) for pk in result.conflicts]
    # conflicts are 409, every other rejection is a bad request
    http_status = status.HTTP_409_CONFLICT if result.is_conflict else status.HTTP_400_BAD_REQUEST
    return Response(payload, status=http_status)


def error_response(message: str, http_status: int, details=None) -> Response:
    payload = {"success": False, "message": message}
    if details:
        payload["details"] = details
    return Response(payload, status=http_status)


class IsBookingOwnerOrAdmin(permissions.BasePermission):
    """Admins see every booking; agents only the ones they created."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if hasattr(user, "is_admin") and user.is_admin():
            return True
        return obj.agent_id == user.id


class BookingViewSet(viewsets.ModelViewSet):
    """Create, review and manage pool and villa bookings."""

    queryset = Booking.objects.select_related("agent").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.action != "list":
            return qs
        user = self.request.user
        # the calendar needs every booking, whoever is looking
        if self.request.query_params.get("for_calendar") == "true":
            return qs
        if hasattr(user, "is_admin") and user.is_admin():
            return qs
        return qs.filter(agent=user)

    def _caller(self) -> Caller:
        return Caller.from_user(self.request.user)

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        data = BookingSerializer(queryset, many=True).data
        return Response({"success": True, "count": len(data), "data": data})

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        booking = self.get_object()
        return Response({"success": True, "data": BookingSerializer(booking).data})

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Please provide all required fields",
                status.HTTP_400_BAD_REQUEST,
                serializer.errors,
            )

        command = CreateBookingCommand(caller=self._caller(), **serializer.validated_data)
        outcome = CreateBookingHandler().handle(command)
        if not outcome.accepted:
            return reject_response(outcome.result)

        return Response(
            {
                "success": True,
                "message": "Booking created successfully",
                "data": BookingSerializer(outcome.booking).data,
            },
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response("Invalid booking data", status.HTTP_400_BAD_REQUEST, serializer.errors)

        command = UpdateBookingCommand(
            caller=self._caller(),
            booking_id=kwargs["pk"],
            changes=dict(serializer.validated_data),
        )
        try:
            outcome = UpdateBookingHandler().handle(command)
        except BookingNotFound as exc:
            return error_response(str(exc), status.HTTP_404_NOT_FOUND)
        except BookingPermissionDenied as exc:
            return error_response(str(exc), status.HTTP_403_FORBIDDEN)

        if not outcome.accepted:
            return reject_response(outcome.result)
        return Response(
            {
                "success": True,
                "message": "Booking updated successfully",
                "data": BookingSerializer(outcome.booking).data,
            }
        )

    def destroy(self, request, *args, **kwargs):  # type: ignore
        command = DeleteBookingCommand(caller=self._caller(), booking_id=kwargs["pk"])
        try:
            DeleteBookingHandler().handle(command)
        except BookingNotFound as exc:
            return error_response(str(exc), status.HTTP_404_NOT_FOUND)
        except BookingPermissionDenied as exc:
            return error_response(str(exc), status.HTTP_403_FORBIDDEN)
        return Response({"success": True, "message": "Booking deleted successfully"})

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = BookingStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                "Invalid status. Must be pending, approved, or rejected",
                status.HTTP_400_BAD_REQUEST,
                serializer.errors,
            )

        command = ChangeBookingStatusCommand(
            caller=self._caller(),
            booking_id=pk,
            status=serializer.validated_data["status"],
            rejection_reason=serializer.validated_data.get("rejection_reason"),
        )
        try:
            outcome = ChangeBookingStatusHandler().handle(command)
        except BookingNotFound as exc:
            return error_response(str(exc), status.HTTP_404_NOT_FOUND)
        except BookingPermissionDenied as exc:
            return error_response(str(exc), status.HTTP_403_FORBIDDEN)

        result = outcome.result
        if not outcome.accepted:
            return reject_response(result)

        new_status = serializer.validated_data["status"]
        if result.noop:
            message = f"Booking status already set to {new_status}"
        else:
            message = " ".join((f"Booking status updated to {new_status}.",) + result.warnings).strip()

        payload = {
            "success": True,
            "message": message,
            "data": BookingSerializer(outcome.booking).data,
        }
        if result.conflicts:
            payload["warnings"] = list(result.warnings)
            payload["conflicts"] = [str(pk) for pk in result.conflicts]
        return Response(payload)

    @action(detail=False, methods=["get"])
    def availability(self, request):  # type: ignore
        snapshot = GetAvailabilityQuery().handle()
        return Response({"success": True, "data": snapshot.to_dict()})
