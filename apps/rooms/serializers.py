"""Serializers for hotels, rooms, rate rules and blocked dates."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .domain.entities import normalize_channel
from .models import BlockedDate, Channel, Hotel, RateRule, Room

MAX_CALENDAR_DAYS = 366


class HotelSerializer(serializers.ModelSerializer):
    class Meta:
        model = Hotel
        fields = ["id", "name", "location", "created_at", "updated_at"]
        read_only_fields = fields


class RoomSerializer(serializers.ModelSerializer):
    hotel_id = serializers.ReadOnlyField(source="hotel.id")
    hotel_name = serializers.ReadOnlyField(source="hotel.name")

    class Meta:
        model = Room
        fields = [
            "id",
            "hotel_id",
            "hotel_name",
            "name",
            "description",
            "max_capacity",
            "status",
            "base_price",
            "airbnb_price",
            "booking_com_price",
            "currency",
            "minimum_nights",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RateRuleSerializer(serializers.ModelSerializer):
    room_id = serializers.ReadOnlyField(source="room.id")
    is_general = serializers.ReadOnlyField()

    class Meta:
        model = RateRule
        fields = [
            "id",
            "room_id",
            "start_date",
            "end_date",
            "weekdays",
            "premium",
            "min_stay_nights",
            "channel",
            "is_general",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RateRuleWriteSerializer(serializers.Serializer):
    """
    Field-level validation of rate-rule commands.

    Date-window and overlap checks need the stored rules and run in the
    command handlers.
    """

    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all())
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    weekdays = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6),
        min_length=1,
        max_length=7,
        help_text="0=Sunday ... 6=Saturday",
    )
    premium = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("-999999"),
        max_value=Decimal("999999"),
    )
    min_stay_nights = serializers.IntegerField(min_value=1, max_value=365, required=False, allow_null=True)
    channel = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)

    def validate_weekdays(self, value):  # type: ignore
        if len(set(value)) != len(value):
            raise serializers.ValidationError("Weekdays must be unique.")
        return sorted(value)

    def validate_channel(self, value):  # type: ignore
        channel = normalize_channel(value)
        if channel is not None and channel not in Channel.values:
            raise serializers.ValidationError(f"Unknown channel '{value}'.")
        return channel

    def validate(self, attrs):  # type: ignore
        instance = self.instance
        start = attrs.get("start_date", getattr(instance, "start_date", None))
        end = attrs.get("end_date", getattr(instance, "end_date", None))
        if start is not None and end is not None and start >= end:
            raise serializers.ValidationError({"end_date": "end_date must be after start_date."})
        if instance is not None and "room" in attrs and attrs["room"].pk != instance.room_id:
            raise serializers.ValidationError({"room": "A rate rule cannot be moved to another room."})
        return attrs


class BlockedDateSerializer(serializers.ModelSerializer):
    room_id = serializers.ReadOnlyField(source="room.id")

    class Meta:
        model = BlockedDate
        fields = ["id", "room_id", "date", "notes", "created_at"]
        read_only_fields = ["id", "room_id", "created_at"]

    def validate_date(self, value):  # type: ignore
        room = self.context.get("room")
        if room is not None and BlockedDate.objects.filter(room=room, date=value).exists():
            raise serializers.ValidationError("This date is already blocked.")
        return value


class StayQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    channel = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError({"check_out": "Check-out date must be after check-in date."})
        attrs["channel"] = normalize_channel(attrs.get("channel"))
        return attrs


class CalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    channel = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):  # type: ignore
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError({"end": "end must not be before start."})
        if (attrs["end"] - attrs["start"]).days >= MAX_CALENDAR_DAYS:
            raise serializers.ValidationError({"end": f"Calendar window is limited to {MAX_CALENDAR_DAYS} days."})
        attrs["channel"] = normalize_channel(attrs.get("channel"))
        return attrs


class NightlyRateSerializer(serializers.Serializer):
    date = serializers.DateField(source="night")
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, source="rate.amount")
    source = serializers.CharField(source="source.value")
    rule_id = serializers.UUIDField(allow_null=True)


class CalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField(source="day")
    status = serializers.CharField()
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, source="rate.amount")
    pricing_source = serializers.CharField(source="source")
    rule_id = serializers.UUIDField(allow_null=True)
    reference_number = serializers.CharField(allow_null=True)
