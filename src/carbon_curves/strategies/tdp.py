"""Generic strategy scaling a reference power curve by the chip TDP."""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from carbon_curves.catalog.models import Interpolation, PowerCurve
from carbon_curves.errors import InputValidationError
from carbon_curves.estimation.embodied import embodied_emissions_g
from carbon_curves.estimation.energy import energy_kwh
from carbon_curves.estimation.interpolation import estimate_wattage
from carbon_curves.estimation.validation import TDPOptions, TDPRow, validate
from carbon_curves.strategies.base import EstimationStrategy, InputRow, OutputRow

__all__ = ["DEFAULT_TDP_CURVE", "GenericTDPStrategy"]

# Share of TDP drawn at 0, 10, 50 and 100 % load.
DEFAULT_TDP_CURVE = PowerCurve(0.12, 0.32, 0.75, 1.02)


class GenericTDPStrategy(EstimationStrategy):
    """Estimate CPU energy from a thermal design power rating.

    The TDP may be set once through ``configure`` or per row. When a row
    carries both ``vcpus-allocated`` and ``vcpus-total`` the energy (and the
    optional embodied share) is prorated by their ratio.
    """

    name: ClassVar[str] = "teads-curve"

    def __init__(self, curve: PowerCurve = DEFAULT_TDP_CURVE) -> None:
        super().__init__()
        self.curve = curve
        self.thermal_design_power: float | None = None
        self.total_embodied_emissions: float | None = None
        self.interpolation = Interpolation.SPLINE

    def _apply_options(self, options: Mapping[str, object]) -> None:
        parsed = validate(TDPOptions, options)
        self.thermal_design_power = parsed.thermal_design_power
        self.total_embodied_emissions = parsed.total_embodied_emissions
        if parsed.interpolation is not None:
            self.interpolation = parsed.interpolation
        if parsed.expected_lifespan is not None:
            self.expected_lifespan_seconds = parsed.expected_lifespan

    def _estimate_row(self, index: int, row: InputRow) -> OutputRow:
        parsed = validate(TDPRow, row, index=index)
        tdp = parsed.thermal_design_power or self.thermal_design_power
        if tdp is None:
            raise InputValidationError(
                f'input[{index}]: "thermal-design-power" parameter is required.'
            )
        interpolation = parsed.interpolation or self.interpolation

        ratio = 1.0
        if parsed.vcpus_allocated is not None and parsed.vcpus_total is not None:
            ratio = parsed.vcpus_allocated / parsed.vcpus_total

        watts = estimate_wattage(parsed.cpu_util, interpolation, self.curve.scaled(tdp))
        output: OutputRow = {
            **row,
            "energy-cpu": energy_kwh(watts, parsed.duration) * ratio,
        }

        total_embodied = (
            parsed.total_embodied_emissions
            if parsed.total_embodied_emissions is not None
            else self.total_embodied_emissions
        )
        if total_embodied is not None:
            output["embodied-carbon"] = embodied_emissions_g(
                total_embodied,
                parsed.duration,
                expected_lifespan_seconds=(
                    parsed.expected_lifespan or self.expected_lifespan_seconds
                ),
                reserved_resources=ratio,
            )
        return output
