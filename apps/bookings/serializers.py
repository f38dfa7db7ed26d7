"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.rooms.domain.entities import normalize_channel
from apps.rooms.models import Channel, Room

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request from a guest or a channel integration."""

    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all())
    guest_name = serializers.CharField(max_length=255)
    guest_email = serializers.EmailField(required=False, allow_blank=True, default="")
    guest_contact = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    channel = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)

    def validate_channel(self, value):  # type: ignore
        channel = normalize_channel(value)
        if channel is not None and channel not in Channel.values:
            raise serializers.ValidationError(f"Unknown channel '{value}'.")
        return channel

    def validate(self, attrs):  # type: ignore
        if attrs["check_in_date"] >= attrs["check_out_date"]:
            raise serializers.ValidationError({"check_out_date": "Check-out date must be after check-in date."})
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking representation."""

    room_id = serializers.ReadOnlyField(source="room.id")
    room_name = serializers.ReadOnlyField(source="room.name")
    nights = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "reference_number",
            "room_id",
            "room_name",
            "guest_name",
            "guest_email",
            "guest_contact",
            "check_in_date",
            "check_out_date",
            "nights",
            "status",
            "total_cost",
            "currency",
            "channel",
            "cancellation_reason",
            "confirmed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
