"""Environment-backed settings primitives for :mod:`carbon_curves`."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["CarbonCurvesSettings", "get_settings", "DEFAULT_EXPECTED_LIFESPAN_SECONDS"]

DEFAULT_EXPECTED_LIFESPAN_SECONDS: float = 4 * 365 * 24 * 3600.0


class CarbonCurvesSettings(BaseSettings):
    """Expose environment-derived configuration knobs for the engine.

    All environment lookups are centralised here so that the rest of the
    package never reads ``os.environ`` directly.

    Attributes:
        data_dir: Directory holding replacement reference tables. When unset
            the tables packaged under ``carbon_curves/data`` are used.
        expected_lifespan_seconds: Default hardware lifespan used when a
            strategy is configured without ``expected-lifespan``.
        log_level: Log level name applied by the command-line entry point.
    """

    data_dir: str | None = Field(default=None, alias="CARBON_CURVES_DATA_DIR")
    expected_lifespan_seconds: float = Field(
        default=DEFAULT_EXPECTED_LIFESPAN_SECONDS,
        alias="CARBON_CURVES_EXPECTED_LIFESPAN",
    )
    log_level: str = Field(default="WARNING", alias="CARBON_CURVES_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("expected_lifespan_seconds", mode="before")
    @classmethod
    def _parse_lifespan(cls, value: object) -> float:
        """Parse the lifespan while tolerating malformed input.

        Args:
            value: Raw environment value.

        Returns:
            Parsed positive float, or the four year default when the value is
            missing, malformed or not positive.
        """

        parsed: float | None = None
        if isinstance(value, bool):
            parsed = None
        elif isinstance(value, (int, float)):
            parsed = float(value)
        elif isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                parsed = None
        if parsed is None or parsed <= 0:
            return DEFAULT_EXPECTED_LIFESPAN_SECONDS
        return parsed

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: object) -> str:
        if not isinstance(value, str) or not value.strip():
            return "WARNING"
        return value.strip().upper()


def get_settings() -> CarbonCurvesSettings:
    """Return a :class:`CarbonCurvesSettings` instance.

    Returns:
        Settings parsed from environment variables.
    """

    return CarbonCurvesSettings()
