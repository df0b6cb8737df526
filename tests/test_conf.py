"""Tests for rentals settings.

Run with: pytest tests/test_conf.py -v
"""

import pytest
from django.core.exceptions import ImproperlyConfigured

from rentals.conf import rental_settings
from rentals.domain import Money


class TestRentalSettings:
    """Tests for the RENTALS settings object."""

    def test_defaults(self, settings):
        settings.RENTALS = {}
        assert rental_settings.DAILY_LATE_FEE == Money.dollars(10)
        assert rental_settings.DAMAGE_FEE_PER_LEVEL == Money.dollars(50)
        assert rental_settings.AUTO_CONFIRM_RESERVATIONS is True
        assert rental_settings.MAINTENANCE_INTERVAL_DAYS == 90

    def test_overrides_are_read_live(self, settings):
        settings.RENTALS = {"DAILY_LATE_FEE": "12.50", "AUTO_CONFIRM_RESERVATIONS": False}
        assert rental_settings.DAILY_LATE_FEE == Money.dollars("12.50")
        assert rental_settings.AUTO_CONFIRM_RESERVATIONS is False

    def test_unknown_setting_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            rental_settings.NOT_A_SETTING

    def test_invalid_amount_is_improperly_configured(self, settings):
        settings.RENTALS = {"DAMAGE_FEE_PER_LEVEL": "fifty"}
        with pytest.raises(ImproperlyConfigured):
            rental_settings.DAMAGE_FEE_PER_LEVEL

    def test_negative_amount_is_improperly_configured(self, settings):
        settings.RENTALS = {"DAILY_LATE_FEE": "-1"}
        with pytest.raises(ImproperlyConfigured):
            rental_settings.DAILY_LATE_FEE
