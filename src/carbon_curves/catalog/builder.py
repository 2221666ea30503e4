"""Construction of normalized instance catalogs from raw vendor tables."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Final

from carbon_curves.catalog.architecture import ArchitectureResolver
from carbon_curves.catalog.models import (
    AVERAGE_ARCHITECTURE,
    ArchitectureUsage,
    EnvelopedCurve,
    InstanceRecord,
    LinearEnvelope,
    PowerCurve,
    Vendor,
)
from carbon_curves.catalog.tables import RawRow, VendorTables

__all__ = [
    "InstanceCatalogBuilder",
    "aggregate_usage",
    "parse_metric",
]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _InstanceColumns:
    name: str
    vcpus: str
    max_vcpus: str


_COLUMNS: Final[dict[Vendor, _InstanceColumns]] = {
    Vendor.AWS: _InstanceColumns(
        "Instance type", "Instance vCPU", "Platform Total Number of vCPU"
    ),
    Vendor.GCP: _InstanceColumns(
        "Machine type", "Instance vCPUs", "Platform vCPUs (highest vCPU possible)"
    ),
    Vendor.AZURE: _InstanceColumns(
        "Virtual Machine", "Instance vCPUs", "Platform vCPUs (highest vCPU possible)"
    ),
}

_CURVE_COLUMNS: Final[tuple[str, str, str, str]] = (
    "Instance @ Idle",
    "Instance @ 10%",
    "Instance @ 50%",
    "Instance @ 100%",
)


def parse_metric(value: object) -> float:
    """Parse a published wattage, accepting a comma decimal separator.

    Args:
        value: Raw cell value such as ``"4,1"``, ``"16.3"`` or ``16.3``.

    Returns:
        The value as a float.

    Raises:
        ValueError: If the cell is empty or not numeric.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid metric value: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    return float(str(value).strip().replace(",", "."))


def _parse_count(row: RawRow, column: str) -> int:
    value = row.get(column)
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Column '{column}' is not an integer: {value!r}") from exc


def aggregate_usage(rows: Iterable[RawRow]) -> dict[str, ArchitectureUsage]:
    """Average min/max watts per architecture.

    A synthetic ``"Average"`` entry holds the mean over every row and serves
    as the fallback bucket.

    Args:
        rows: Usage rows carrying ``Architecture``, ``Min Watts`` and
            ``Max Watts`` columns.

    Returns:
        Mapping of architecture name to its averaged usage.
    """

    grouped: dict[str, list[tuple[float, float]]] = defaultdict(list)
    total_min = 0.0
    total_max = 0.0
    count = 0
    for row in rows:
        min_watts = parse_metric(row["Min Watts"])
        max_watts = parse_metric(row["Max Watts"])
        grouped[str(row["Architecture"])].append((min_watts, max_watts))
        total_min += min_watts
        total_max += max_watts
        count += 1

    usage = {
        architecture: ArchitectureUsage(
            architecture,
            sum(pair[0] for pair in pairs) / len(pairs),
            sum(pair[1] for pair in pairs) / len(pairs),
        )
        for architecture, pairs in grouped.items()
    }
    if count:
        usage[AVERAGE_ARCHITECTURE] = ArchitectureUsage(
            AVERAGE_ARCHITECTURE, total_min / count, total_max / count
        )
    return usage


def _parse_curve(row: RawRow) -> PowerCurve | None:
    cells = [row.get(column) for column in _CURVE_COLUMNS]
    if any(cell is None or str(cell).strip() == "" for cell in cells):
        return None
    return PowerCurve(*(parse_metric(cell) for cell in cells))


def _mean_envelope(usages: list[ArchitectureUsage], vcpus: int) -> LinearEnvelope:
    min_watts = sum(usage.min_watts for usage in usages) / len(usages)
    max_watts = sum(usage.max_watts for usage in usages) / len(usages)
    return LinearEnvelope(min_watts * vcpus, max_watts * vcpus)


class InstanceCatalogBuilder:
    """Merge raw vendor tables into :class:`InstanceRecord` mappings.

    The builder is pure: calling :meth:`build` twice on the same tables
    yields equal catalogs.
    """

    def __init__(self, tables: VendorTables) -> None:
        self.tables = tables
        self.vendor = tables.vendor
        self._columns = _COLUMNS[tables.vendor]

    def build(self) -> dict[str, InstanceRecord]:
        """Build the full catalog with consumption envelopes.

        Returns:
            Mapping of instance type to record.

        Raises:
            UnsupportedValueError: If an AWS architecture label resolves to a
                bucket absent from the usage table.
        """

        usage = aggregate_usage(self.tables.usage)
        if self.vendor is Vendor.AWS:
            records = self._build_mapped(usage)
        else:
            records = self._build_microarchitecture(usage)
        catalog = self._merge_embodied(records)
        LOGGER.info(
            "Instance catalog built",
            extra={
                "vendor": self.vendor.value,
                "instances": len(catalog),
                "architectures": len(usage),
            },
        )
        return catalog

    def build_curve_catalog(self) -> dict[str, InstanceRecord]:
        """Build a catalog holding only measured curves.

        Instances without all four load points are left out. No architecture
        resolution takes place, so usage tables are not consulted.
        """

        records: dict[str, InstanceRecord] = {}
        for row in self.tables.instances:
            curve = _parse_curve(row)
            if curve is None:
                continue
            name = str(row[self._columns.name])
            records[name] = InstanceRecord(
                name=name,
                vcpus=_parse_count(row, self._columns.vcpus),
                max_vcpus=_parse_count(row, self._columns.max_vcpus),
                consumption=curve,
            )
        return self._merge_embodied(records)

    def _build_mapped(
        self, usage: Mapping[str, ArchitectureUsage]
    ) -> dict[str, InstanceRecord]:
        resolver = ArchitectureResolver(usage)
        records: dict[str, InstanceRecord] = {}
        for row in self.tables.instances:
            name = str(row[self._columns.name])
            vcpus = _parse_count(row, self._columns.vcpus)
            labels = self.tables.architectures.get(name, (AVERAGE_ARCHITECTURE,))
            usages = [resolver.usage_for(label) for label in labels]
            envelope = _mean_envelope(usages, vcpus)
            curve = _parse_curve(row)
            records[name] = InstanceRecord(
                name=name,
                vcpus=vcpus,
                max_vcpus=_parse_count(row, self._columns.max_vcpus),
                consumption=(
                    EnvelopedCurve(curve, envelope) if curve is not None else envelope
                ),
            )
        return records

    def _build_microarchitecture(
        self, usage: Mapping[str, ArchitectureUsage]
    ) -> dict[str, InstanceRecord]:
        records: dict[str, InstanceRecord] = {}
        for row in self.tables.instances:
            name = str(row[self._columns.name])
            vcpus = _parse_count(row, self._columns.vcpus)
            architecture = str(row.get("Microarchitecture", ""))
            if architecture not in usage:
                architecture = AVERAGE_ARCHITECTURE
            envelope = usage[architecture].envelope(vcpus)
            records[name] = InstanceRecord(
                name=name,
                vcpus=vcpus,
                max_vcpus=_parse_count(row, self._columns.max_vcpus),
                consumption=envelope,
            )
        return records

    def _merge_embodied(
        self, records: dict[str, InstanceRecord]
    ) -> dict[str, InstanceRecord]:
        merged = dict(records)
        for row in self.tables.embodied:
            instance_type = str(row.get("type", ""))
            record = merged.get(instance_type)
            if record is None:
                LOGGER.debug(
                    "Embodied row without matching instance",
                    extra={"vendor": self.vendor.value, "instance_type": instance_type},
                )
                continue
            merged[instance_type] = replace(
                record, embodied_kg_co2e=parse_metric(row["total"])
            )
        return merged
