"""AWS strategy driven by measured per-instance power curves."""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from carbon_curves.catalog.builder import InstanceCatalogBuilder
from carbon_curves.catalog.models import InstanceRecord, Interpolation, Vendor
from carbon_curves.catalog.tables import VendorTables, load_vendor_tables
from carbon_curves.errors import ConfigValidationError, UnsupportedValueError
from carbon_curves.estimation.embodied import instance_embodied_emissions_g
from carbon_curves.estimation.energy import energy_kwh
from carbon_curves.estimation.interpolation import estimate_wattage
from carbon_curves.estimation.validation import CurveOptions, CurveRow, validate
from carbon_curves.strategies.base import (
    EstimationStrategy,
    InputRow,
    LazyCatalog,
    OutputRow,
)

__all__ = ["AWSCurveStrategy"]


class AWSCurveStrategy(EstimationStrategy):
    """Interpolate the Teads measured load points of AWS instances.

    Rows may override ``instance-type``, ``expected-lifespan`` and
    ``interpolation`` for themselves without changing the configuration.
    """

    name: ClassVar[str] = "teads-aws"

    def __init__(self, tables: VendorTables | None = None) -> None:
        super().__init__()
        self._tables = tables
        self._catalog = LazyCatalog(self._build_catalog)
        self.instance_type: str | None = None
        self.interpolation = Interpolation.SPLINE

    @property
    def catalog(self) -> dict[str, InstanceRecord]:
        return self._catalog.get()

    def _build_catalog(self) -> dict[str, InstanceRecord]:
        tables = self._tables or load_vendor_tables(Vendor.AWS)
        return InstanceCatalogBuilder(tables).build_curve_catalog()

    def _apply_options(self, options: Mapping[str, object]) -> None:
        parsed = validate(CurveOptions, options)
        if parsed.instance_type is not None:
            self._lookup(parsed.instance_type, scope="configure")
            self.instance_type = parsed.instance_type
        if parsed.expected_lifespan is not None:
            self.expected_lifespan_seconds = parsed.expected_lifespan
        if parsed.interpolation is not None:
            self.interpolation = parsed.interpolation

    def _estimate_row(self, index: int, row: InputRow) -> OutputRow:
        parsed = validate(CurveRow, row, index=index)
        instance_type = parsed.instance_type or self.instance_type
        if instance_type is None:
            raise ConfigValidationError(
                self._message("Instance type is not provided")
            )
        record = self._lookup(instance_type)
        interpolation = parsed.interpolation or self.interpolation
        lifespan = parsed.expected_lifespan or self.expected_lifespan_seconds

        watts = estimate_wattage(parsed.cpu_util, interpolation, record.consumption)
        energy = energy_kwh(watts, parsed.duration)
        embodied = instance_embodied_emissions_g(
            record, parsed.duration, expected_lifespan_seconds=lifespan
        )
        return {**row, "energy": energy, "embodied-carbon": embodied}

    def _lookup(
        self, instance_type: str, *, scope: str | None = None
    ) -> InstanceRecord:
        record = self.catalog.get(instance_type)
        if record is None:
            raise UnsupportedValueError(
                self._message(
                    f"Instance type {instance_type} is not supported",
                    scope=scope,
                    supported=tuple(self.catalog),
                )
            )
        return record
