"""FilterSet definitions for rate-rule listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .domain.entities import normalize_channel
from .models import RateRule


class RateRuleFilterSet(django_filters.FilterSet):
    """Filters used by the rate-rule list endpoint."""

    room = django_filters.UUIDFilter(field_name="room_id")
    hotel = django_filters.UUIDFilter(field_name="room__hotel_id")
    channel = django_filters.CharFilter(method="filter_channel")
    # Rules touching the [start, end] window
    start = django_filters.DateFilter(field_name="end_date", lookup_expr="gte")
    end = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")

    class Meta:
        model = RateRule
        fields = ["room", "hotel", "channel"]

    def filter_channel(self, queryset, name, value):  # type: ignore
        """Rules for the channel plus the ones that apply to every channel."""
        channel = normalize_channel(value)
        if channel is None:
            return queryset
        return queryset.filter(Q(channel=channel) | Q(channel__isnull=True))
