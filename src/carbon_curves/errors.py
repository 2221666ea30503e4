"""Exception hierarchy raised by the estimation engine."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "CarbonCurvesError",
    "ConfigValidationError",
    "InputValidationError",
    "ReferenceDataError",
    "UnsupportedValueError",
    "build_error_message",
]


class CarbonCurvesError(ValueError):
    """Base class for all estimation failures."""


class InputValidationError(CarbonCurvesError):
    """A required row field is missing or has the wrong type."""


class UnsupportedValueError(CarbonCurvesError):
    """A vendor, instance type, architecture or mode is not supported."""


class ConfigValidationError(CarbonCurvesError):
    """The strategy lacks the context it needs to run."""


class ReferenceDataError(RuntimeError):
    """A packaged or user supplied reference table cannot be parsed."""


def build_error_message(
    owner: str,
    message: str,
    *,
    scope: str | None = None,
    supported: Iterable[str] | None = None,
) -> str:
    """Format an error message prefixed with the raising component.

    Args:
        owner: Name of the component raising the error.
        message: Human readable description of the failure.
        scope: Optional operation name appended to ``owner``.
        supported: Optional collection of accepted values listed after the
            message to guide correction.

    Returns:
        The formatted message, for example
        ``"CatalogVendorStrategy(configure): Vendor 'x' is not supported."``.
    """

    prefix = f"{owner}({scope})" if scope else owner
    text = f"{prefix}: {message}"
    if supported is not None:
        text = f"{text}. Supported: {', '.join(sorted(supported))}"
    return f"{text}."
