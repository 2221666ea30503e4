"""Instance catalogs built from static vendor reference tables."""

from __future__ import annotations

from carbon_curves.catalog.architecture import ArchitectureResolver
from carbon_curves.catalog.builder import InstanceCatalogBuilder, aggregate_usage
from carbon_curves.catalog.models import (
    ArchitectureUsage,
    EnvelopedCurve,
    InstanceRecord,
    Interpolation,
    LinearEnvelope,
    PowerCurve,
    Vendor,
)
from carbon_curves.catalog.tables import VendorTables, load_vendor_tables

__all__ = [
    "ArchitectureResolver",
    "ArchitectureUsage",
    "EnvelopedCurve",
    "InstanceCatalogBuilder",
    "InstanceRecord",
    "Interpolation",
    "LinearEnvelope",
    "PowerCurve",
    "Vendor",
    "VendorTables",
    "aggregate_usage",
    "load_vendor_tables",
]
