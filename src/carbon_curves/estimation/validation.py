"""Pydantic schemas for strategy options and input rows.

Rows and options use the hyphenated field names of the observation format
(``cpu-util``, ``instance-type`` ...). Validation failures surface as
:class:`~carbon_curves.errors.InputValidationError` with a message naming the
offending parameter.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from carbon_curves.catalog.models import Interpolation
from carbon_curves.errors import InputValidationError

__all__ = [
    "CatalogOptions",
    "CatalogRow",
    "CurveOptions",
    "CurveRow",
    "TDPOptions",
    "TDPRow",
    "validate",
]

ModelT = TypeVar("ModelT", bound=BaseModel)


def _require_number(value: object) -> object:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected number, received {type(value).__name__}")
    return value


def _number_or_numeric_string(value: object) -> object:
    if isinstance(value, bool):
        raise ValueError("invalid type, expected number or numeric string")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValueError(
                f"not a numeric string, received {value!r}"
            ) from None
    raise ValueError(
        "invalid type, expected number or numeric string, "
        f"received {type(value).__name__}"
    )


Number = Annotated[float, BeforeValidator(_require_number)]
NumericLike = Annotated[float, BeforeValidator(_number_or_numeric_string)]


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class _LifespanMixin(_Schema):
    expected_lifespan: Number | None = Field(
        default=None, alias="expected-lifespan", gt=0
    )
    interpolation: Interpolation | None = None


class CatalogOptions(_LifespanMixin):
    """Static options of the multi-vendor catalog strategy."""

    vendor: str | None = None
    instance_type: str | None = Field(default=None, alias="instance-type")


class CurveOptions(_LifespanMixin):
    """Static options of the AWS curve strategy."""

    instance_type: str | None = Field(default=None, alias="instance-type")


class TDPOptions(_LifespanMixin):
    """Static options of the generic TDP strategy."""

    thermal_design_power: Number | None = Field(
        default=None, alias="thermal-design-power", gt=0
    )
    total_embodied_emissions: Number | None = Field(
        default=None, alias="total-embodied-emissions", ge=0
    )


class _UsageRow(_Schema):
    duration: Number = Field(gt=0)
    cpu_util: Number = Field(alias="cpu-util")
    timestamp: str | None = None


class CatalogRow(_UsageRow):
    """Input row of the catalog strategy."""

    vendor: str | None = None
    instance_type: str | None = Field(default=None, alias="instance-type")


class CurveRow(_UsageRow):
    """Input row of the AWS curve strategy."""

    instance_type: str | None = Field(default=None, alias="instance-type")
    expected_lifespan: Number | None = Field(
        default=None, alias="expected-lifespan", gt=0
    )
    interpolation: Interpolation | None = None


class TDPRow(_UsageRow):
    """Input row of the generic TDP strategy."""

    cpu_util: Number = Field(alias="cpu-util", ge=0, le=100)
    thermal_design_power: Number | None = Field(
        default=None, alias="thermal-design-power", gt=0
    )
    interpolation: Interpolation | None = None
    vcpus_allocated: NumericLike | None = Field(
        default=None, alias="vcpus-allocated", gt=0
    )
    vcpus_total: NumericLike | None = Field(default=None, alias="vcpus-total", gt=0)
    total_embodied_emissions: Number | None = Field(
        default=None, alias="total-embodied-emissions", ge=0
    )
    expected_lifespan: Number | None = Field(
        default=None, alias="expected-lifespan", gt=0
    )


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"]) or "input"
    if error["type"] == "missing":
        detail = "required"
    else:
        detail = error["msg"][0].lower() + error["msg"][1:]
    return f'"{location}" parameter is {detail}. Error code: {error["type"]}'


def validate(
    model: type[ModelT], data: Mapping[str, object], *, index: int | None = None
) -> ModelT:
    """Validate ``data`` against ``model``.

    Args:
        model: Schema to validate with.
        data: Raw options or input row.
        index: Position of the row in the batch, quoted in error messages.

    Returns:
        The validated model instance.

    Raises:
        InputValidationError: If a field is missing or has the wrong type.
    """

    if not isinstance(data, Mapping):
        where = f"input[{index}]" if index is not None else "options"
        raise InputValidationError(f"{where} must be a mapping.")
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        message = _describe(exc)
        if index is not None:
            message = f"input[{index}]: {message}"
        raise InputValidationError(f"{message}.") from exc
