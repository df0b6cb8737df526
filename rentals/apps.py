from django.apps import AppConfig


class RentalsConfig(AppConfig):
    name = "rentals"
    verbose_name = "Equipment rentals"

    def ready(self) -> None:
        from rentals import signals  # noqa: F401
