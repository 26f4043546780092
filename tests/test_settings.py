"""Tests for environment-driven settings."""

import os
from unittest.mock import patch

import pytest

from innkeep.infra.settings import Settings, get_settings, load_settings, reset_settings_cache


class TestLoadSettings:
    def test_defaults(self):
        assert load_settings({}) == Settings(
            hotel_timezone="Asia/Manila",
            hold_window_minutes=10,
            cancellation_window_minutes=20,
            auto_checkout_interval_seconds=300,
            auto_checkout_enabled=True,
        )

    def test_overrides(self):
        settings = load_settings(
            {
                "HOTEL_TIMEZONE": "Europe/Lisbon",
                "HOLD_WINDOW_MINUTES": "15",
                "CANCELLATION_WINDOW_MINUTES": "45",
                "AUTO_CHECKOUT_INTERVAL_SECONDS": "60",
                "AUTO_CHECKOUT_ENABLED": "off",
            }
        )
        assert settings.hotel_timezone == "Europe/Lisbon"
        assert settings.hold_window_minutes == 15
        assert settings.cancellation_window_minutes == 45
        assert settings.auto_checkout_interval_seconds == 60
        assert settings.auto_checkout_enabled is False

    def test_blank_values_use_defaults(self):
        assert load_settings({"HOLD_WINDOW_MINUTES": " "}).hold_window_minutes == 10

    @pytest.mark.parametrize(
        "name,value",
        [
            ("HOLD_WINDOW_MINUTES", "ten"),
            ("CANCELLATION_WINDOW_MINUTES", "0"),
            ("AUTO_CHECKOUT_INTERVAL_SECONDS", "-5"),
            ("AUTO_CHECKOUT_ENABLED", "maybe"),
            ("HOTEL_TIMEZONE", "Mars/Olympus"),
        ],
    )
    def test_invalid_values_name_the_variable(self, name, value):
        with pytest.raises(ValueError, match=name):
            load_settings({name: value})


class TestGetSettings:
    def test_cached_until_reset(self):
        with patch.dict(os.environ, {"HOLD_WINDOW_MINUTES": "12"}):
            assert get_settings().hold_window_minutes == 12
        assert get_settings().hold_window_minutes == 12
        reset_settings_cache()
        assert get_settings().hold_window_minutes == 10
