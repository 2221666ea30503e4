"""Multi-vendor catalog strategy for AWS, GCP and Azure instances."""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import ClassVar

from carbon_curves.catalog.builder import InstanceCatalogBuilder
from carbon_curves.catalog.models import InstanceRecord, Interpolation, Vendor
from carbon_curves.catalog.tables import VendorTables, load_vendor_tables
from carbon_curves.errors import ConfigValidationError, UnsupportedValueError
from carbon_curves.estimation.embodied import instance_embodied_emissions_g
from carbon_curves.estimation.energy import energy_kwh
from carbon_curves.estimation.interpolation import estimate_wattage
from carbon_curves.estimation.validation import CatalogOptions, CatalogRow, validate
from carbon_curves.strategies.base import (
    EstimationStrategy,
    InputRow,
    LazyCatalog,
    OutputRow,
)

__all__ = ["CatalogVendorStrategy"]

_SUPPORTED_VENDORS: tuple[str, ...] = tuple(vendor.value for vendor in Vendor)
# Only AWS publishes measured load points.
_SPLINE_VENDORS: frozenset[Vendor] = frozenset({Vendor.AWS})


class CatalogVendorStrategy(EstimationStrategy):
    """Estimate from the cloud carbon footprint instance catalogs.

    Energy comes from the instance's linear min/max envelope, or from a
    spline through its measured curve when ``interpolation`` is ``spline``
    (AWS only). Embodied emissions are amortized over the instance's share of
    its platform's vCPUs.
    """

    name: ClassVar[str] = "ccf"

    def __init__(self, tables: Mapping[Vendor, VendorTables] | None = None) -> None:
        super().__init__()
        self._tables = dict(tables) if tables is not None else None
        self._catalogs: dict[Vendor, LazyCatalog[dict[str, InstanceRecord]]] = {
            vendor: LazyCatalog(partial(self._build_catalog, vendor))
            for vendor in Vendor
        }
        self.vendor: Vendor | None = None
        self.instance_type: str | None = None
        self.interpolation = Interpolation.LINEAR

    def catalog(self, vendor: Vendor) -> dict[str, InstanceRecord]:
        """Return the catalog of ``vendor``, building it on first use."""

        return self._catalogs[vendor].get()

    def _build_catalog(self, vendor: Vendor) -> dict[str, InstanceRecord]:
        tables = (
            self._tables[vendor]
            if self._tables is not None and vendor in self._tables
            else load_vendor_tables(vendor)
        )
        return InstanceCatalogBuilder(tables).build()

    def _apply_options(self, options: Mapping[str, object]) -> None:
        parsed = validate(CatalogOptions, options)
        vendor = self._resolve_vendor(parsed.vendor, scope="configure")
        interpolation = parsed.interpolation or Interpolation.LINEAR
        if vendor is not None:
            self._check_interpolation(interpolation, vendor, scope="configure")
            if parsed.instance_type is not None:
                self._lookup(vendor, parsed.instance_type, scope="configure")

        self.vendor = vendor
        self.instance_type = parsed.instance_type
        self.interpolation = interpolation
        if parsed.expected_lifespan is not None:
            self.expected_lifespan_seconds = parsed.expected_lifespan

    def _estimate_row(self, index: int, row: InputRow) -> OutputRow:
        parsed = validate(CatalogRow, row, index=index)
        vendor = self._resolve_vendor(parsed.vendor) or self.vendor
        instance_type = parsed.instance_type or self.instance_type
        if vendor is None or not instance_type:
            raise ConfigValidationError(
                self._message(
                    "Incomplete configuration: 'instance-type' or 'vendor' is missing"
                )
            )
        self._check_interpolation(self.interpolation, vendor)
        record = self._lookup(vendor, instance_type)

        if self.interpolation is Interpolation.SPLINE and not record.has_curve:
            raise UnsupportedValueError(
                self._message(
                    f"Instance type {record.name} has no measured power curve"
                )
            )
        profile = record.consumption
        watts = estimate_wattage(parsed.cpu_util, self.interpolation, profile)
        energy = energy_kwh(watts, parsed.duration)
        embodied = instance_embodied_emissions_g(
            record,
            parsed.duration,
            expected_lifespan_seconds=self.expected_lifespan_seconds,
        )
        self.logger.debug(
            "Row estimated",
            extra={
                "vendor": vendor.value,
                "instance_type": record.name,
                "watts": watts,
                "profile": profile.kind,
            },
        )
        return {**row, "energy": energy, "embodied-carbon": embodied}

    def _resolve_vendor(
        self, value: str | None, *, scope: str | None = None
    ) -> Vendor | None:
        if value is None:
            return None
        try:
            return Vendor(value)
        except ValueError:
            raise UnsupportedValueError(
                self._message(
                    f"Vendor '{value}' is not supported",
                    scope=scope,
                    supported=_SUPPORTED_VENDORS,
                )
            ) from None

    def _check_interpolation(
        self, interpolation: Interpolation, vendor: Vendor, *, scope: str | None = None
    ) -> None:
        if interpolation is Interpolation.SPLINE and vendor not in _SPLINE_VENDORS:
            raise UnsupportedValueError(
                self._message(
                    f"Interpolation {interpolation.value} method is not supported "
                    f"for vendor {vendor.value}",
                    scope=scope,
                )
            )

    def _lookup(
        self, vendor: Vendor, instance_type: str, *, scope: str | None = None
    ) -> InstanceRecord:
        catalog = self.catalog(vendor)
        record = catalog.get(instance_type)
        if record is None:
            raise UnsupportedValueError(
                self._message(
                    f"Instance type {instance_type} is not supported for vendor "
                    f"{vendor.value}",
                    scope=scope,
                    supported=tuple(catalog),
                )
            )
        return record
