"""Settings for the rentals app.

Read from the ``RENTALS`` dict in Django settings, e.g.::

    RENTALS = {
        "DAILY_LATE_FEE": "15.00",
        "AUTO_CONFIRM_RESERVATIONS": False,
    }

Values are looked up on every access, so ``override_settings`` and the
pytest-django ``settings`` fixture take effect immediately.
"""

from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from rentals.domain import Money

DEFAULTS: dict[str, Any] = {
    "DAILY_LATE_FEE": "10.00",
    "DAMAGE_FEE_PER_LEVEL": "50.00",
    "AUTO_CONFIRM_RESERVATIONS": True,
    "MAINTENANCE_INTERVAL_DAYS": 90,
}

MONEY_SETTINGS = frozenset({"DAILY_LATE_FEE", "DAMAGE_FEE_PER_LEVEL"})


class RentalSettings:
    """Attribute access to rentals settings, falling back to ``DEFAULTS``."""

    def __init__(self, defaults: dict[str, Any] | None = None) -> None:
        self.defaults = defaults or DEFAULTS

    @property
    def user_settings(self) -> dict[str, Any]:
        return getattr(settings, "RENTALS", None) or {}

    def __getattr__(self, attr: str) -> Any:
        if attr not in self.defaults:
            raise AttributeError(f"Invalid rentals setting: '{attr}'")
        value = self.user_settings.get(attr, self.defaults[attr])
        if attr in MONEY_SETTINGS:
            try:
                return Money.dollars(Decimal(str(value)))
            except (ArithmeticError, TypeError, ValueError) as exc:
                raise ImproperlyConfigured(f"RENTALS['{attr}'] is not a valid amount") from exc
        return value


rental_settings = RentalSettings()
