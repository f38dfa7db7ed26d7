"""Hotel, room, rate-rule and blocked-date API views."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.application.command_handlers import quote_stay, room_calendar

from .application.command_handlers import (
    CreateRateRuleCommand,
    CreateRateRuleHandler,
    DeleteRateRuleCommand,
    DeleteRateRuleHandler,
    UpdateRateRuleCommand,
    UpdateRateRuleHandler,
)
from .filters import RateRuleFilterSet
from .models import BlockedDate, Hotel, RateRule, Room
from .serializers import (
    BlockedDateSerializer,
    CalendarDaySerializer,
    CalendarQuerySerializer,
    HotelSerializer,
    NightlyRateSerializer,
    RateRuleSerializer,
    RateRuleWriteSerializer,
    RoomSerializer,
    StayQuerySerializer,
)


class IsStaffOrReadOnly(permissions.BasePermission):
    """Anyone may read; only staff may change prices, rules and calendars."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))


class HotelViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Hotel.objects.all()
    serializer_class = HotelSerializer
    permission_classes = [permissions.AllowAny]


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    """Rooms with their quote and calendar endpoints."""

    queryset = Room.objects.select_related("hotel").all()
    serializer_class = RoomSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["hotel", "status"]

    @action(detail=True, methods=["get"])
    def quote(self, request, pk=None):  # type: ignore
        """Price of a stay and whether it can be booked right now."""
        room = self.get_object()
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        quote = quote_stay(
            room.id,
            query.validated_data["check_in"],
            query.validated_data["check_out"],
            query.validated_data["channel"],
        )
        pricing = quote.pricing
        return Response(
            {
                "room_id": room.id,
                "check_in": quote.dates.start_date,
                "check_out": quote.dates.end_date,
                "channel": quote.channel,
                "nights": pricing.night_count,
                "currency": pricing.total_cost.currency,
                "total_cost": f"{pricing.total_cost.amount:.2f}",
                "min_nightly_rate": f"{pricing.min_nightly_rate.amount:.2f}",
                "breakdown": NightlyRateSerializer(pricing.nights, many=True).data,
                "available": quote.available,
                "conflict": quote.conflict.to_dict() | {"detail": quote.conflict.message} if quote.conflict else None,
            }
        )

    @action(detail=True, methods=["get"])
    def calendar(self, request, pk=None):  # type: ignore
        """Status and nightly rate of every date in [start, end]."""
        room = self.get_object()
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        days = room_calendar(
            room.id,
            query.validated_data["start"],
            query.validated_data["end"],
            query.validated_data["channel"],
        )
        return Response(
            {
                "room_id": room.id,
                "currency": room.currency,
                "channel": query.validated_data["channel"],
                "dates": CalendarDaySerializer(days, many=True).data,
            }
        )


class RateRuleViewSet(viewsets.ModelViewSet):
    """
    Rate rules of all rooms, filterable by room, hotel and channel.

    Writes go through the command handlers, which lock the room and reject
    rules overlapping an existing one.
    """

    queryset = RateRule.objects.select_related("room", "room__hotel").order_by("room", "start_date", "channel")
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend]
    filterset_class = RateRuleFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return RateRuleWriteSerializer
        return RateRuleSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        rule = CreateRateRuleHandler().handle(
            CreateRateRuleCommand(
                room_id=data["room"].pk,
                start_date=data["start_date"],
                end_date=data["end_date"],
                weekdays=frozenset(data["weekdays"]),
                premium=data["premium"],
                min_stay_nights=data.get("min_stay_nights"),
                channel=data.get("channel"),
            )
        )
        read_serializer = RateRuleSerializer(rule, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        changes = {name: value for name, value in serializer.validated_data.items() if name != "room"}
        rule = UpdateRateRuleHandler().handle(UpdateRateRuleCommand(rule_id=instance.pk, changes=changes))
        read_serializer = RateRuleSerializer(rule, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        instance = self.get_object()
        DeleteRateRuleHandler().handle(DeleteRateRuleCommand(rule_id=instance.pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


class RoomCalendarMixin:
    """Resolves the room from the URL for nested calendar resources."""

    room_lookup_url_kwarg = "room_id"
    permission_classes = [IsStaffOrReadOnly]

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        self.room_object = get_object_or_404(Room, pk=kwargs.get(self.room_lookup_url_kwarg))

    def get_room(self) -> Room:
        return self.room_object

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["room"] = getattr(self, "room_object", None)
        return context


class BlockedDateViewSet(
    RoomCalendarMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Dates on which a room cannot be booked."""

    serializer_class = BlockedDateSerializer
    queryset = BlockedDate.objects.select_related("room").all()

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset().filter(room=self.get_room())
        start = self.request.query_params.get("start")
        end = self.request.query_params.get("end")
        if start:
            qs = qs.filter(date__gte=start)
        if end:
            qs = qs.filter(date__lte=end)
        return qs.order_by("date")

    def perform_create(self, serializer):  # type: ignore
        serializer.save(room=self.get_room())
