"""URL routing for hotels, rooms and rate rules."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BlockedDateViewSet, HotelViewSet, RateRuleViewSet, RoomViewSet

router = DefaultRouter()
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"rate-rules", RateRuleViewSet, basename="rate-rule")
router.register(r"", HotelViewSet, basename="hotel")

blocked_date_list = BlockedDateViewSet.as_view({"get": "list", "post": "create"})
blocked_date_detail = BlockedDateViewSet.as_view({"get": "retrieve", "delete": "destroy"})

urlpatterns = [
    path(
        "rooms/<uuid:room_id>/blocked-dates/",
        blocked_date_list,
        name="room-blocked-date-list",
    ),
    path(
        "rooms/<uuid:room_id>/blocked-dates/<uuid:pk>/",
        blocked_date_detail,
        name="room-blocked-date-detail",
    ),
    path("", include(router.urls)),
]
