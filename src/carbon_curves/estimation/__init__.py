"""Wattage interpolation, energy conversion and embodied amortization."""

from __future__ import annotations

from carbon_curves.estimation.embodied import (
    HOURS_PER_YEAR,
    embodied_emissions_g,
    instance_embodied_emissions_g,
    lifespan_seconds,
)
from carbon_curves.estimation.energy import energy_kwh
from carbon_curves.estimation.interpolation import estimate_wattage

__all__ = [
    "HOURS_PER_YEAR",
    "embodied_emissions_g",
    "energy_kwh",
    "estimate_wattage",
    "instance_embodied_emissions_g",
    "lifespan_seconds",
]
