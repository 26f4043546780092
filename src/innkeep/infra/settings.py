"""Deployment settings for the booking core.

Loaded from environment variables once per process. Every knob has a
default so a bare DATABASE_URL is enough to run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Booking core settings.

    Attributes:
        hotel_timezone: IANA timezone used for "today" and stay dates.
        hold_window_minutes: How long another user's pending booking keeps
            blocking capacity.
        cancellation_window_minutes: How long after creation a booking may
            still be cancelled.
        auto_checkout_interval_seconds: Cadence of the auto-checkout sweep.
        auto_checkout_enabled: Whether the worker runs the sweep on a timer.
    """

    hotel_timezone: str = "Asia/Manila"
    hold_window_minutes: int = 10
    cancellation_window_minutes: int = 20
    auto_checkout_interval_seconds: int = 300
    auto_checkout_enabled: bool = True


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _timezone(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = (environ.get(name) or "").strip() or default
    try:
        ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"{name} is not a known timezone: {raw!r}") from None
    return raw


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Raises:
        ValueError: If a variable is set to an invalid value.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()
    return Settings(
        hotel_timezone=_timezone(env, "HOTEL_TIMEZONE", defaults.hotel_timezone),
        hold_window_minutes=_positive_int(
            env, "HOLD_WINDOW_MINUTES", defaults.hold_window_minutes
        ),
        cancellation_window_minutes=_positive_int(
            env, "CANCELLATION_WINDOW_MINUTES", defaults.cancellation_window_minutes
        ),
        auto_checkout_interval_seconds=_positive_int(
            env, "AUTO_CHECKOUT_INTERVAL_SECONDS", defaults.auto_checkout_interval_seconds
        ),
        auto_checkout_enabled=_flag(
            env, "AUTO_CHECKOUT_ENABLED", defaults.auto_checkout_enabled
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    return load_settings()


def reset_settings_cache() -> None:
    """Forget cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
