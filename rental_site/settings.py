"""Django settings for the equipment rentals project.

Everything deployment-specific comes from environment variables.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-development-key")

DEBUG = os.environ.get("DJANGO_DEBUG", "false").lower() == "true"

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "rentals",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

RENTALS = {
    "DAILY_LATE_FEE": os.environ.get("RENTALS_DAILY_LATE_FEE", "10.00"),
    "DAMAGE_FEE_PER_LEVEL": os.environ.get("RENTALS_DAMAGE_FEE_PER_LEVEL", "50.00"),
    "AUTO_CONFIRM_RESERVATIONS": (
        os.environ.get("RENTALS_AUTO_CONFIRM_RESERVATIONS", "true").lower() == "true"
    ),
    "MAINTENANCE_INTERVAL_DAYS": int(os.environ.get("RENTALS_MAINTENANCE_INTERVAL_DAYS", "90")),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "rentals": {
            "handlers": ["console"],
            "level": os.environ.get("RENTALS_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
