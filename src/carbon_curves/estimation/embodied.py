"""Amortization of embodied (manufacturing) emissions."""

from __future__ import annotations

from carbon_curves.catalog.models import InstanceRecord
from carbon_curves.errors import UnsupportedValueError, build_error_message
from carbon_curves.settings import DEFAULT_EXPECTED_LIFESPAN_SECONDS

__all__ = [
    "HOURS_PER_YEAR",
    "embodied_emissions_g",
    "instance_embodied_emissions_g",
    "lifespan_seconds",
]

HOURS_PER_YEAR: float = 8760.0


def lifespan_seconds(years: float) -> float:
    """Convert a lifespan in years (of 8760 hours) into seconds."""

    return years * HOURS_PER_YEAR * 3600.0


def embodied_emissions_g(
    total_kg_co2e: float,
    duration_seconds: float,
    *,
    expected_lifespan_seconds: float = DEFAULT_EXPECTED_LIFESPAN_SECONDS,
    reserved_resources: float = 1.0,
    total_resources: float = 1.0,
) -> float:
    """Amortize total embodied emissions over a usage window.

    ``M = TE * (TR / EL) * (RR / TotR)`` where ``TE`` is the total embodied
    emissions, ``TR`` the time reserved, ``EL`` the expected lifespan, ``RR``
    the resources reserved and ``TotR`` the total resources. The result is
    converted from kgCO2e to gCO2e.

    Args:
        total_kg_co2e: Lifecycle emissions of the hardware in kgCO2e.
        duration_seconds: Length of the usage window.
        expected_lifespan_seconds: Time the hardware stays installed.
        reserved_resources: Resources reserved by the workload (vCPUs).
        total_resources: Resources available on the hardware (vCPUs).

    Returns:
        Embodied emissions attributable to the window, in gCO2e.
    """

    duration_hours = duration_seconds / 3600
    lifespan_hours = expected_lifespan_seconds / 3600
    return (
        total_kg_co2e
        * 1000
        * (duration_hours / lifespan_hours)
        * (reserved_resources / total_resources)
    )


def instance_embodied_emissions_g(
    record: InstanceRecord,
    duration_seconds: float,
    *,
    expected_lifespan_seconds: float = DEFAULT_EXPECTED_LIFESPAN_SECONDS,
) -> float:
    """Amortize a catalog instance's embodied emissions over a window.

    The instance reserves its own vCPUs out of the platform total.

    Raises:
        UnsupportedValueError: If the catalog has no embodied emissions for
            the instance.
    """

    if record.embodied_kg_co2e is None:
        raise UnsupportedValueError(
            build_error_message(
                "EmbodiedEmissions",
                f"Instance type {record.name} has no embodied emissions data",
            )
        )
    return embodied_emissions_g(
        record.embodied_kg_co2e,
        duration_seconds,
        expected_lifespan_seconds=expected_lifespan_seconds,
        reserved_resources=record.vcpus,
        total_resources=record.max_vcpus,
    )
