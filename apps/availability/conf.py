"""Access to the ``AVAILABILITY_ENGINE`` settings with defaults."""

from __future__ import annotations

from typing import Any

from django.conf import settings  # type: ignore

DEFAULTS: dict[str, Any] = {
    "BOOKING_TIMEOUT_HOURS": 24,
    "EXPORT_DEFAULT_DAYS": 90,
    "ANALYTICS_DEFAULT_DAYS": 30,
    "CALENDAR_PRODID": "-//Rental Marketplace//Availability//EN",
    "CALENDAR_UID_DOMAIN": "rental-marketplace",
    "PARALLEL_FETCH": True,
    "DEFAULT_CURRENCY": "NOK",
}


def engine_setting(name: str) -> Any:
    if name not in DEFAULTS:
        raise KeyError(f"Unknown availability engine setting: {name}")
    configured = getattr(settings, "AVAILABILITY_ENGINE", {})
    return configured.get(name, DEFAULTS[name])
