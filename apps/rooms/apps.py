from django.apps import AppConfig  # type: ignore


class RoomsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.rooms"
    label = "rooms"
