"""API views for the booking domain."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from .models import Booking
from .serializers import BookingCancelSerializer, BookingCreateSerializer, BookingSerializer


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Create bookings and move them through their lifecycle.

    Anyone may request a booking; listing and state changes are staff only.
    """

    queryset = Booking.objects.select_related("room", "room__hotel").all()
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["room", "status", "channel", "reference_number"]

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permissions.AllowAny()]
        return [permissions.IsAdminUser()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = CreateBookingHandler().handle(
            CreateBookingCommand(
                room_id=data["room"].pk,
                check_in=data["check_in_date"],
                check_out=data["check_out_date"],
                guest_name=data["guest_name"],
                guest_email=data.get("guest_email", ""),
                guest_contact=data.get("guest_contact", ""),
                channel=data.get("channel"),
            )
        )
        read_serializer = BookingSerializer(
            Booking.objects.select_related("room").get(pk=booking.id),
            context=self.get_serializer_context(),
        )
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        ConfirmBookingHandler().handle(ConfirmBookingCommand(booking_id=booking.pk))
        booking.refresh_from_db()
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CancelBookingHandler().handle(
            CancelBookingCommand(booking_id=booking.pk, reason=serializer.validated_data["reason"])
        )
        booking.refresh_from_db()
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)
