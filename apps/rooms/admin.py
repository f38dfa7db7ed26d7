"""Admin registrations for hotels, rooms and their calendars."""

from __future__ import annotations

from django.contrib import admin

from .models import BlockedDate, Hotel, RateRule, Room


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("name", "status", "base_price", "airbnb_price", "booking_com_price", "minimum_nights")


class BlockedDateInline(admin.TabularInline):
    model = BlockedDate
    extra = 0
    fields = ("date", "notes")


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "created_at")
    search_fields = ("name", "location")
    inlines = (RoomInline,)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "hotel",
        "status",
        "base_price",
        "airbnb_price",
        "booking_com_price",
        "currency",
        "minimum_nights",
    )
    list_filter = ("status", "hotel")
    search_fields = ("name", "hotel__name")
    inlines = (BlockedDateInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(RateRule)
class RateRuleAdmin(admin.ModelAdmin):
    """Read-only: rules are written through the API, which runs the conflict check."""

    list_display = ("room", "start_date", "end_date", "weekdays", "premium", "min_stay_nights", "channel")
    list_filter = ("channel", "room__hotel")
    search_fields = ("room__name",)

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False
