from django.apps import AppConfig  # type: ignore


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"
    verbose_name = "Bookings"

    def ready(self) -> None:
        from .bootstrap import build_message_bus

        # One bus per process, handed to every unit of work the app builds
        self.message_bus = build_message_bus()
