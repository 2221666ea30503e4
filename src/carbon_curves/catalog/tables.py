"""Loaders for the static reference tables backing the catalogs.

Tables ship as JSON resources inside :mod:`carbon_curves.data`. A directory
holding files with the same names can replace them through the
``CARBON_CURVES_DATA_DIR`` environment variable.
"""

from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Final

from carbon_curves.catalog.models import Vendor
from carbon_curves.errors import ReferenceDataError
from carbon_curves.settings import get_settings

__all__ = ["RawRow", "VendorTables", "load_vendor_tables", "clear_table_cache"]

LOGGER = logging.getLogger(__name__)

RawRow = dict[str, object]

_DATA_PACKAGE: Final[str] = "carbon_curves.data"


@dataclass(frozen=True, slots=True)
class VendorTables:
    """Raw rows for one vendor, exactly as published.

    Attributes:
        vendor: Vendor the rows belong to.
        instances: Instance specification rows (vCPUs, platform vCPUs and,
            for AWS, the measured load points).
        usage: Per-architecture min/max watts rows.
        embodied: Instance type to total embodied emissions rows.
        architectures: Instance type to raw architecture labels. Only AWS
            publishes this mapping.
    """

    vendor: Vendor
    instances: tuple[RawRow, ...]
    usage: tuple[RawRow, ...]
    embodied: tuple[RawRow, ...]
    architectures: dict[str, tuple[str, ...]] = field(default_factory=dict)


def _read_text(name: str, data_dir: str | None) -> str:
    if data_dir:
        path = pathlib.Path(data_dir) / name
        if not path.exists():
            raise FileNotFoundError(f"Reference table not found: {path}")
        return path.read_text(encoding="utf-8")
    return resources.files(_DATA_PACKAGE).joinpath(name).read_text(encoding="utf-8")


def _load_json(name: str, data_dir: str | None) -> object:
    text = _read_text(name, data_dir)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(
            f"Failed to parse reference table {name}"
        ) from exc


def _load_rows(name: str, data_dir: str | None) -> tuple[RawRow, ...]:
    payload = _load_json(name, data_dir)
    if not isinstance(payload, list):
        raise ReferenceDataError(
            f"Reference table {name} must contain a JSON array"
        )
    rows: list[RawRow] = []
    for item in payload:
        if not isinstance(item, dict):
            LOGGER.warning("Skipping malformed row in %s: %r", name, item)
            continue
        rows.append({str(key): value for key, value in item.items()})
    return tuple(rows)


def _load_architectures(name: str, data_dir: str | None) -> dict[str, tuple[str, ...]]:
    payload = _load_json(name, data_dir)
    if not isinstance(payload, dict):
        raise ReferenceDataError(
            f"Reference table {name} must contain a JSON object"
        )
    return {
        str(instance): tuple(str(label) for label in labels)
        for instance, labels in payload.items()
        if isinstance(labels, list)
    }


@lru_cache(maxsize=8)
def _cached_vendor_tables(vendor: Vendor, data_dir: str | None) -> VendorTables:
    prefix = vendor.value
    architectures = (
        _load_architectures(f"{prefix}-architectures.json", data_dir)
        if vendor is Vendor.AWS
        else {}
    )
    tables = VendorTables(
        vendor=vendor,
        instances=_load_rows(f"{prefix}-instances.json", data_dir),
        usage=_load_rows(f"{prefix}-use.json", data_dir),
        embodied=_load_rows(f"{prefix}-embodied.json", data_dir),
        architectures=architectures,
    )
    LOGGER.debug(
        "Loaded reference tables",
        extra={
            "vendor": prefix,
            "instances": len(tables.instances),
            "usage_rows": len(tables.usage),
            "embodied_rows": len(tables.embodied),
        },
    )
    return tables


def load_vendor_tables(vendor: Vendor | str) -> VendorTables:
    """Load the raw reference tables for ``vendor``.

    Args:
        vendor: Vendor enum member or its string value.

    Returns:
        The raw tables. Results are cached per vendor and data directory.

    Raises:
        FileNotFoundError: If ``CARBON_CURVES_DATA_DIR`` points at a directory
            lacking one of the tables.
        ReferenceDataError: If a table cannot be parsed.
    """

    return _cached_vendor_tables(Vendor(vendor), get_settings().data_dir)


def clear_table_cache() -> None:
    """Forget previously loaded tables."""

    _cached_vendor_tables.cache_clear()
