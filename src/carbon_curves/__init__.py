"""Carbon Curves - energy and embodied carbon estimation for compute instances."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "AWSCurveStrategy",
    "CatalogVendorStrategy",
    "GenericTDPStrategy",
    "CarbonCurvesError",
    "create_strategy",
]

if TYPE_CHECKING:
    from .errors import CarbonCurvesError
    from .strategies import (
        AWSCurveStrategy,
        CatalogVendorStrategy,
        GenericTDPStrategy,
        create_strategy,
    )


def __getattr__(name: str) -> Any:
    """Lazily import the strategies so scipy loads only when needed."""

    module_map = {
        "AWSCurveStrategy": "strategies",
        "CatalogVendorStrategy": "strategies",
        "GenericTDPStrategy": "strategies",
        "create_strategy": "strategies",
        "CarbonCurvesError": "errors",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
