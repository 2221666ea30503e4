"""Energy conversion helpers."""

from __future__ import annotations

SECONDS_PER_HOUR: float = 3600.0
WATTS_PER_KILOWATT: float = 1000.0


def energy_kwh(watts: float, duration_seconds: float) -> float:
    """Convert a constant power draw over a duration into kilowatt hours.

    ``(watts * seconds) / 3600`` gives watt hours; dividing by 1000 gives kWh.
    Non-finite inputs propagate to the result.
    """

    return watts * duration_seconds / SECONDS_PER_HOUR / WATTS_PER_KILOWATT
