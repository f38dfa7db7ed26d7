from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("rooms", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="room",
            name="currency",
            field=models.CharField(
                choices=[("EUR", "EUR"), ("USD", "USD"), ("GBP", "GBP"), ("KZT", "KZT")],
                default="EUR",
                max_length=3,
            ),
        ),
        migrations.AddConstraint(
            model_name="room",
            constraint=models.CheckConstraint(
                condition=models.Q(currency__in=("EUR", "USD", "GBP", "KZT")),
                name="room_supported_currency",
            ),
        ),
    ]
