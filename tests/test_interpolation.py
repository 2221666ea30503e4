"""Tests for wattage interpolation between power breakpoints."""

from __future__ import annotations

import math

import pytest
from hypothesis import given, strategies as st

from carbon_curves.catalog.models import (
    EnvelopedCurve,
    Interpolation,
    LinearEnvelope,
    PowerCurve,
)
from carbon_curves.estimation.interpolation import (
    envelope_wattage,
    estimate_wattage,
    linear_curve_wattage,
    spline_curve_wattage,
)

M5N_CURVE = PowerCurve(4.1, 6.7, 11.8, 16.3)

_wattage = st.floats(min_value=0.0, max_value=1e4, allow_nan=False)


_BREAKPOINTS = [(0, 4.1), (10, 6.7), (50, 11.8), (100, 16.3)]


@pytest.mark.parametrize(("utilization", "expected"), _BREAKPOINTS)
def test_linear_mode_reproduces_breakpoints_exactly(
    utilization: float, expected: float
) -> None:
    assert estimate_wattage(utilization, Interpolation.LINEAR, M5N_CURVE) == expected


@pytest.mark.parametrize(("utilization", "expected"), _BREAKPOINTS)
def test_spline_mode_passes_through_breakpoints(
    utilization: float, expected: float
) -> None:
    watts = estimate_wattage(utilization, Interpolation.SPLINE, M5N_CURVE)

    assert watts == pytest.approx(expected)


@pytest.mark.parametrize(
    ("utilization", "expected"),
    [(8, 6.18), (15, 7.3375), (55, 12.25), (95, 15.85)],
)
def test_linear_mode_interpolates_between_breakpoints(
    utilization: float, expected: float
) -> None:
    assert linear_curve_wattage(utilization, M5N_CURVE) == pytest.approx(expected)


def test_linear_mode_clamps_outside_range() -> None:
    assert linear_curve_wattage(-5, M5N_CURVE) == pytest.approx(4.1)
    assert linear_curve_wattage(120, M5N_CURVE) == pytest.approx(16.3)


def test_spline_mode_extrapolates() -> None:
    """The natural spline continues past 100 % instead of clamping."""

    assert spline_curve_wattage(110, M5N_CURVE) > 16.3


def test_spline_matches_tdp_reference_values() -> None:
    curve = PowerCurve(0.12, 0.32, 0.75, 1.02).scaled(300)

    assert spline_curve_wattage(10, curve) == pytest.approx(96.0)
    assert spline_curve_wattage(50, curve) == pytest.approx(225.0)
    assert spline_curve_wattage(100, curve) == pytest.approx(306.0)


def test_envelope_ignores_mode() -> None:
    envelope = LinearEnvelope(2.0, 12.0)

    linear = estimate_wattage(30, Interpolation.LINEAR, envelope)
    spline = estimate_wattage(30, Interpolation.SPLINE, envelope)

    assert linear == spline == pytest.approx(5.0)


def test_enveloped_curve_follows_envelope_in_linear_mode() -> None:
    profile = EnvelopedCurve(M5N_CURVE, LinearEnvelope(2.0, 12.0))

    assert estimate_wattage(30, Interpolation.LINEAR, profile) == pytest.approx(5.0)


def test_enveloped_curve_follows_curve_in_spline_mode() -> None:
    profile = EnvelopedCurve(M5N_CURVE, LinearEnvelope(2.0, 12.0))

    watts = estimate_wattage(50, Interpolation.SPLINE, profile)

    assert watts == pytest.approx(11.8)


def test_envelope_clamps_utilization() -> None:
    envelope = LinearEnvelope(1.0, 3.0)

    assert envelope_wattage(-10, envelope) == pytest.approx(1.0)
    assert envelope_wattage(150, envelope) == pytest.approx(3.0)


def test_string_mode_is_accepted() -> None:
    mode: Interpolation = "linear"  # type: ignore[assignment]

    assert estimate_wattage(15, mode, M5N_CURVE) == pytest.approx(7.3375)


def test_nan_utilization_propagates() -> None:
    assert math.isnan(spline_curve_wattage(float("nan"), M5N_CURVE))


@given(
    utilization=st.floats(min_value=0, max_value=100),
    low=_wattage,
    spread=_wattage,
)
def test_envelope_stays_within_bounds(
    utilization: float, low: float, spread: float
) -> None:
    envelope = LinearEnvelope(low, low + spread)
    watts = envelope_wattage(utilization, envelope)

    assert low - 1e-9 <= watts <= low + spread + 1e-6


@given(
    utilization=st.floats(min_value=0, max_value=100),
    steps=st.lists(_wattage, min_size=4, max_size=4),
)
def test_linear_curve_stays_within_breakpoints(
    utilization: float, steps: list[float]
) -> None:
    values = sorted(steps)
    curve = PowerCurve(*values)
    watts = linear_curve_wattage(utilization, curve)

    assert values[0] - 1e-6 <= watts <= values[-1] + 1e-6


@given(
    first=st.floats(min_value=0, max_value=100),
    second=st.floats(min_value=0, max_value=100),
)
def test_linear_curve_is_monotonic_for_increasing_breakpoints(
    first: float, second: float
) -> None:
    low, high = sorted((first, second))

    assert linear_curve_wattage(low, M5N_CURVE) <= linear_curve_wattage(
        high, M5N_CURVE
    ) + 1e-12
