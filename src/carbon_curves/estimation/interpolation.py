"""Wattage estimation between measured power breakpoints.

Spline mode evaluates a natural cubic spline through the four breakpoints and
lets it extrapolate freely. Linear mode interpolates piecewise between the
bracketing breakpoints and clamps to the end values outside ``[0, 100]``.
Linear envelopes ignore the mode entirely. Enveloped curves use their
envelope in linear mode and their measured curve in spline mode.
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np
from scipy.interpolate import CubicSpline

from carbon_curves.catalog.models import (
    CURVE_POINTS,
    ConsumptionProfile,
    EnvelopedCurve,
    Interpolation,
    LinearEnvelope,
    PowerCurve,
)

__all__ = [
    "estimate_wattage",
    "envelope_wattage",
    "linear_curve_wattage",
    "spline_curve_wattage",
]


@lru_cache(maxsize=512)
def _natural_spline(values: tuple[float, float, float, float]) -> CubicSpline:
    return CubicSpline(CURVE_POINTS, values, bc_type="natural")


def spline_curve_wattage(utilization: float, curve: PowerCurve) -> float:
    """Evaluate the natural cubic spline of ``curve`` at ``utilization``."""

    return float(_natural_spline(curve.values)(utilization))


def linear_curve_wattage(utilization: float, curve: PowerCurve) -> float:
    """Interpolate ``curve`` linearly between the bracketing breakpoints.

    Breakpoint utilizations return the measured value exactly.
    """

    return float(np.interp(utilization, CURVE_POINTS, curve.values))


def envelope_wattage(utilization: float, envelope: LinearEnvelope) -> float:
    """Scale linearly from ``min_watts`` at 0 % to ``max_watts`` at 100 %."""

    clamped = min(max(utilization, 0.0), 100.0)
    return envelope.min_watts + (envelope.max_watts - envelope.min_watts) * (
        clamped / 100
    )


def estimate_wattage(
    utilization: float,
    mode: Interpolation,
    profile: ConsumptionProfile,
) -> float:
    """Estimate wattage at ``utilization`` percent.

    Args:
        utilization: CPU utilization in percent.
        mode: Interpolation method for curve profiles.
        profile: Measured curve, linear envelope, or both.

    Returns:
        Estimated power draw in watts.
    """

    spline = Interpolation(mode) is Interpolation.SPLINE
    if isinstance(profile, EnvelopedCurve):
        if spline:
            return spline_curve_wattage(utilization, profile.curve)
        return envelope_wattage(utilization, profile.envelope)
    if isinstance(profile, LinearEnvelope):
        return envelope_wattage(utilization, profile)
    if spline:
        return spline_curve_wattage(utilization, profile)
    return linear_curve_wattage(utilization, profile)
