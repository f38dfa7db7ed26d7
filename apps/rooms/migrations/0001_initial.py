import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Hotel",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Hotel",
                "verbose_name_plural": "Hotels",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("max_capacity", models.PositiveSmallIntegerField(default=2)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("out_of_service", "Out of service"),
                            ("cleaning", "Cleaning"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                (
                    "base_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Nightly price for the website and any channel without its own price.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "airbnb_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "booking_com_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("currency", models.CharField(default="EUR", max_length=3)),
                (
                    "minimum_nights",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "hotel",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rooms",
                        to="rooms.hotel",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["hotel", "name"],
                "indexes": [models.Index(fields=["hotel", "status"], name="rooms_room_hotel_i_5d0c1e_idx")],
            },
        ),
        migrations.CreateModel(
            name="RateRule",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "weekdays",
                    models.JSONField(
                        default=list,
                        help_text="Weekdays the rule applies to (0=Sunday ... 6=Saturday).",
                    ),
                ),
                (
                    "premium",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Added to the base price; negative values are discounts.",
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("-999999")),
                            django.core.validators.MaxValueValidator(Decimal("999999")),
                        ],
                    ),
                ),
                (
                    "min_stay_nights",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(365),
                        ],
                    ),
                ),
                (
                    "channel",
                    models.CharField(
                        blank=True,
                        help_text="Sales channel; empty means the rule applies to every channel.",
                        max_length=50,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rate_rules",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Rate rule",
                "verbose_name_plural": "Rate rules",
                "ordering": ["room", "start_date", "channel"],
                "indexes": [
                    models.Index(fields=["room", "start_date", "end_date"], name="rooms_rater_room_id_8f2a4b_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_date__gt=models.F("start_date")),
                        name="rate_rule_valid_date_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BlockedDate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField()),
                ("notes", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="blocked_dates",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Blocked date",
                "verbose_name_plural": "Blocked dates",
                "ordering": ["date"],
                "constraints": [
                    models.UniqueConstraint(fields=("room", "date"), name="blocked_date_unique_per_room"),
                ],
            },
        ),
    ]
