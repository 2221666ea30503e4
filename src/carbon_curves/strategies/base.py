"""Shared lifecycle for estimation strategies."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import ClassVar, Generic, Self, TypeVar

from carbon_curves.errors import ConfigValidationError, build_error_message
from carbon_curves.logging_pipeline import RunLoggerAdapter
from carbon_curves.settings import get_settings

__all__ = ["EstimationStrategy", "InputRow", "OutputRow", "LazyCatalog"]

InputRow = Mapping[str, object]
OutputRow = dict[str, object]

CatalogT = TypeVar("CatalogT")


class LazyCatalog(Generic[CatalogT]):
    """Build a catalog on first access, exactly once."""

    def __init__(self, factory: Callable[[], CatalogT]) -> None:
        self._factory = factory
        self._value: CatalogT | None = None
        self._lock = threading.Lock()

    @property
    def built(self) -> bool:
        return self._value is not None

    def get(self) -> CatalogT:
        """Return the catalog, building it under a lock on first use."""

        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self._factory()
            return self._value


class EstimationStrategy(ABC):
    """Base class for the Unconfigured -> Configured -> Executing lifecycle.

    Subclasses validate their static options in :meth:`_apply_options` and
    compute one output row in :meth:`_estimate_row`. Rows are processed in
    order and the first failure aborts the batch.
    """

    name: ClassVar[str] = "strategy"

    def __init__(self) -> None:
        self.logger = RunLoggerAdapter(
            logging.getLogger(f"carbon_curves.strategies.{self.name}"),
            {"strategy": self.name},
        )
        self.expected_lifespan_seconds = get_settings().expected_lifespan_seconds
        self._configured = False

    @property
    def configured(self) -> bool:
        return self._configured

    def bind_run(self, run_id: str) -> Self:
        """Tag every record this strategy logs with ``run_id``."""

        self.logger.bind(run_id=run_id)
        return self

    def configure(self, options: Mapping[str, object] | None = None) -> Self:
        """Validate static options and move to the configured state.

        Args:
            options: Strategy specific static parameters.

        Returns:
            The strategy itself, ready for :meth:`execute`.

        Raises:
            ConfigValidationError: If ``options`` is missing.
            InputValidationError: If an option has the wrong type.
            UnsupportedValueError: If an option names an unknown value.
        """

        if options is None:
            raise ConfigValidationError(
                self._message("Static parameters are missing", scope="configure")
            )
        self._apply_options(options)
        self._configured = True
        self.logger.debug(
            "Strategy configured",
            extra={"options": dict(options)},
        )
        return self

    async def execute(self, rows: Sequence[InputRow]) -> list[OutputRow]:
        """Estimate energy and embodied emissions for every row.

        Args:
            rows: Observations in time order.

        Returns:
            New rows holding the input fields plus the computed ones, in input
            order.

        Raises:
            ConfigValidationError: If the strategy was never configured.
            InputValidationError: If a row is malformed.
            UnsupportedValueError: If a row references unsupported values.
        """

        if not self._configured:
            raise ConfigValidationError(
                self._message("Strategy is not configured", scope="execute")
            )
        outputs = [self._estimate_row(index, row) for index, row in enumerate(rows)]
        self.logger.debug("Batch estimated", extra={"rows": len(outputs)})
        return outputs

    @abstractmethod
    def _apply_options(self, options: Mapping[str, object]) -> None:
        """Validate and store static options."""

    @abstractmethod
    def _estimate_row(self, index: int, row: InputRow) -> OutputRow:
        """Compute the output row for ``row``."""

    def _message(
        self,
        message: str,
        *,
        scope: str | None = None,
        supported: Sequence[str] | None = None,
    ) -> str:
        return build_error_message(
            type(self).__name__, message, scope=scope, supported=supported
        )
