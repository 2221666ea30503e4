"""Normalized catalog records shared by the estimation strategies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal, TypeAlias

__all__ = [
    "AVERAGE_ARCHITECTURE",
    "CURVE_POINTS",
    "ArchitectureUsage",
    "ConsumptionProfile",
    "EnvelopedCurve",
    "InstanceRecord",
    "Interpolation",
    "LinearEnvelope",
    "PowerCurve",
    "Vendor",
]

AVERAGE_ARCHITECTURE: Final[str] = "Average"
CURVE_POINTS: Final[tuple[float, float, float, float]] = (0.0, 10.0, 50.0, 100.0)


class Vendor(str, Enum):
    """Cloud providers covered by the reference tables."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class Interpolation(str, Enum):
    """Methods for estimating wattage between measured breakpoints."""

    SPLINE = "spline"
    LINEAR = "linear"


@dataclass(frozen=True, slots=True)
class PowerCurve:
    """Measured wattage at 0, 10, 50 and 100 % utilization."""

    idle: float
    ten_percent: float
    fifty_percent: float
    hundred_percent: float
    kind: Literal["curve"] = "curve"

    @property
    def values(self) -> tuple[float, float, float, float]:
        """Return the wattages in breakpoint order."""

        return (self.idle, self.ten_percent, self.fifty_percent, self.hundred_percent)

    def scaled(self, factor: float) -> PowerCurve:
        """Return a copy with every breakpoint multiplied by ``factor``."""

        return PowerCurve(*(value * factor for value in self.values))


@dataclass(frozen=True, slots=True)
class LinearEnvelope:
    """Minimum and maximum wattage joined by a straight line."""

    min_watts: float
    max_watts: float
    kind: Literal["envelope"] = "envelope"


@dataclass(frozen=True, slots=True)
class EnvelopedCurve:
    """Measured curve paired with the architecture envelope of the instance.

    Linear estimates follow the envelope and spline estimates follow the
    measured curve.
    """

    curve: PowerCurve
    envelope: LinearEnvelope
    kind: Literal["enveloped-curve"] = "enveloped-curve"


ConsumptionProfile: TypeAlias = PowerCurve | LinearEnvelope | EnvelopedCurve


@dataclass(frozen=True, slots=True)
class ArchitectureUsage:
    """Averaged per-vCPU wattage envelope of a CPU architecture."""

    architecture: str
    min_watts: float
    max_watts: float

    def envelope(self, vcpus: int = 1) -> LinearEnvelope:
        """Scale the per-vCPU figures to an instance with ``vcpus`` vCPUs."""

        return LinearEnvelope(self.min_watts * vcpus, self.max_watts * vcpus)


@dataclass(frozen=True, slots=True)
class InstanceRecord:
    """Normalized description of a single cloud instance type.

    Attributes:
        name: Instance type, unique within a vendor.
        vcpus: Number of vCPUs exposed by the instance.
        max_vcpus: vCPUs available on the parent platform.
        consumption: Measured curve, linear envelope, or both for catalogs
            that publish curves next to architecture usage.
        embodied_kg_co2e: Total manufacturing emissions in kgCO2e, or ``None``
            when the embodied table has no entry for the instance.
    """

    name: str
    vcpus: int
    max_vcpus: int
    consumption: ConsumptionProfile
    embodied_kg_co2e: float | None = None

    def __post_init__(self) -> None:
        if self.vcpus < 1:
            raise ValueError(f"{self.name}: vcpus must be >= 1")
        if self.max_vcpus < self.vcpus:
            raise ValueError(f"{self.name}: max_vcpus must be >= vcpus")
        if self.embodied_kg_co2e is not None and self.embodied_kg_co2e < 0:
            raise ValueError(f"{self.name}: embodied_kg_co2e must be >= 0")

    @property
    def curve(self) -> PowerCurve | None:
        """The measured 4-point curve, if the vendor publishes one."""

        if isinstance(self.consumption, EnvelopedCurve):
            return self.consumption.curve
        if isinstance(self.consumption, PowerCurve):
            return self.consumption
        return None

    @property
    def envelope(self) -> LinearEnvelope | None:
        """The linear min/max envelope, if architecture usage is known."""

        if isinstance(self.consumption, EnvelopedCurve):
            return self.consumption.envelope
        if isinstance(self.consumption, LinearEnvelope):
            return self.consumption
        return None

    @property
    def has_curve(self) -> bool:
        """Whether a measured 4-point curve is available."""

        return self.curve is not None
