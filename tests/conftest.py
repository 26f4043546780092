"""Shared pytest fixtures for Innkeep tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch):
    """Re-read settings from a clean environment for every test.

    Settings are cached per process; without this a test that sets
    HOLD_WINDOW_MINUTES would leak its value into later tests.
    """
    from innkeep.infra.settings import reset_settings_cache

    for name in (
        "HOTEL_TIMEZONE",
        "HOLD_WINDOW_MINUTES",
        "CANCELLATION_WINDOW_MINUTES",
        "AUTO_CHECKOUT_INTERVAL_SECONDS",
        "AUTO_CHECKOUT_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()
