"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingReferenceSequence


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "reference_number",
        "room",
        "guest_name",
        "status",
        "check_in_date",
        "check_out_date",
        "total_cost",
        "channel",
        "created_at",
    )
    list_filter = ("status", "channel", "check_in_date")
    search_fields = ("reference_number", "guest_name", "guest_email", "room__name")
    # Bookings change state through the API so the lifecycle events fire
    readonly_fields = (
        "reference_number",
        "status",
        "total_cost",
        "currency",
        "confirmed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )


@admin.register(BookingReferenceSequence)
class BookingReferenceSequenceAdmin(admin.ModelAdmin):
    list_display = ("year", "created_at")
