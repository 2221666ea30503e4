"""Estimation strategies and the registry used to look them up by name."""

from __future__ import annotations

from carbon_curves.errors import UnsupportedValueError, build_error_message
from carbon_curves.strategies.aws_curve import AWSCurveStrategy
from carbon_curves.strategies.base import EstimationStrategy, LazyCatalog
from carbon_curves.strategies.catalog import CatalogVendorStrategy
from carbon_curves.strategies.tdp import DEFAULT_TDP_CURVE, GenericTDPStrategy

__all__ = [
    "AWSCurveStrategy",
    "CatalogVendorStrategy",
    "DEFAULT_TDP_CURVE",
    "EstimationStrategy",
    "GenericTDPStrategy",
    "LazyCatalog",
    "STRATEGIES",
    "create_strategy",
]

STRATEGIES: dict[str, type[EstimationStrategy]] = {
    CatalogVendorStrategy.name: CatalogVendorStrategy,
    AWSCurveStrategy.name: AWSCurveStrategy,
    GenericTDPStrategy.name: GenericTDPStrategy,
}


def create_strategy(name: str) -> EstimationStrategy:
    """Instantiate the unconfigured strategy registered under ``name``.

    Raises:
        UnsupportedValueError: If no strategy uses ``name``.
    """

    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise UnsupportedValueError(
            build_error_message(
                "create_strategy",
                f"Model '{name}' is not supported",
                supported=STRATEGIES,
            )
        ) from None
    return strategy_cls()
