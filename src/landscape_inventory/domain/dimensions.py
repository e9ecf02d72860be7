"""Dimension payloads attached to a product.

A product carries exactly one payload variant; the variant's class is the
dimension kind. Switching kind always starts from an empty variant.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from .pricing import parse_decimal

KIND_WEIGHT = "weight"
KIND_MEASUREMENTS = "measurements"
KIND_VOLUME = "volume"
KIND_SIZE = "size"
KIND_UNITS = "units"

DIMENSION_KINDS: Tuple[str, ...] = (
    KIND_WEIGHT,
    KIND_MEASUREMENTS,
    KIND_VOLUME,
    KIND_SIZE,
    KIND_UNITS,
)
DEFAULT_DIMENSION_KIND = KIND_WEIGHT

WEIGHT_UNITS: Tuple[str, ...] = ("kg", "g", "lb", "oz")
MEASUREMENT_UNITS: Tuple[str, ...] = ("mm", "cm", "m", "in", "ft")
VOLUME_UNITS: Tuple[str, ...] = ("L", "ml")

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class WeightDimension:
    value: Optional[Decimal] = None
    unit: str = "kg"

    kind = KIND_WEIGHT
    units = WEIGHT_UNITS


@dataclass(frozen=True)
class MeasurementsDimension:
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    length: Optional[Decimal] = None
    unit: str = "mm"

    kind = KIND_MEASUREMENTS
    units = MEASUREMENT_UNITS


@dataclass(frozen=True)
class VolumeDimension:
    value: Optional[Decimal] = None
    unit: str = "L"

    kind = KIND_VOLUME
    units = VOLUME_UNITS


@dataclass(frozen=True)
class SizeDimension:
    value: str = ""

    kind = KIND_SIZE
    units = ()


@dataclass(frozen=True)
class UnitsDimension:
    count: Optional[int] = None

    kind = KIND_UNITS
    units = ()


Dimension = Union[WeightDimension, MeasurementsDimension, VolumeDimension, SizeDimension, UnitsDimension]

_VARIANTS: Dict[str, Type[Any]] = {
    KIND_WEIGHT: WeightDimension,
    KIND_MEASUREMENTS: MeasurementsDimension,
    KIND_VOLUME: VolumeDimension,
    KIND_SIZE: SizeDimension,
    KIND_UNITS: UnitsDimension,
}


def payload_fields(kind: str) -> Tuple[str, ...]:
    """Names of the payload fields that belong to `kind`."""
    return tuple(f.name for f in fields(_variant(kind)))


def _variant(kind: str) -> Type[Any]:
    try:
        return _VARIANTS[kind]
    except KeyError:
        raise ValueError(f"unknown dimension kind: {kind!r}") from None


def empty_dimension(kind: str = DEFAULT_DIMENSION_KIND) -> Dimension:
    return _variant(kind)()


def _coerce_field(kind: str, name: str, value: Any) -> Any:
    if name == "unit":
        unit = str(value).strip() if value is not None else ""
        allowed = _variant(kind).units
        if unit not in allowed:
            raise ValueError(f"unit for {kind} must be one of {', '.join(allowed)}")
        return unit
    if kind == KIND_SIZE:
        return "" if value is None else str(value).strip()
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    number = parse_decimal(value)
    if number is None:
        raise ValueError(f"{kind}.{name} must be a number")
    if kind == KIND_UNITS:
        if number != number.to_integral_value():
            raise ValueError("units.count must be a whole number")
        return int(number)
    return number


def with_field(dimension: Dimension, name: str, value: Any) -> Dimension:
    """Return a copy of `dimension` with one payload field replaced.

    Raises ValueError for fields of another kind or values that do not parse.
    """
    kind = dimension.kind
    if name not in payload_fields(kind):
        raise ValueError(f"{name!r} is not a {kind} field")
    current = asdict(dimension)
    current[name] = _coerce_field(kind, name, value)
    return _variant(kind)(**current)


def dimension_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[Dimension]:
    """Build a variant from its stored mapping; keys of other kinds are ignored."""
    if not data:
        return None
    kind = data.get("kind")
    dimension = empty_dimension(str(kind)) if kind is not None else empty_dimension()
    for name in payload_fields(dimension.kind):
        if name in data:
            dimension = with_field(dimension, name, data[name])
    return dimension


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format(value, "f")
    return value


def dimension_to_dict(dimension: Optional[Dimension]) -> Optional[Dict[str, Any]]:
    if dimension is None:
        return None
    out: Dict[str, Any] = {"kind": dimension.kind}
    for name, value in asdict(dimension).items():
        out[name] = _json_value(value)
    return out


def _text(value: Optional[Decimal]) -> str:
    return format(value, "f") if value is not None else "0"


def format_dimension(dimension: Optional[Dimension]) -> str:
    """Human readable dimension text for listings."""
    if isinstance(dimension, MeasurementsDimension):
        parts = (dimension.width, dimension.height, dimension.length)
        if all(p is None for p in parts):
            return NOT_AVAILABLE
        u = dimension.unit
        return " x ".join(f"{_text(p)}{u}" for p in parts)
    if isinstance(dimension, (WeightDimension, VolumeDimension)):
        if dimension.value is None:
            return NOT_AVAILABLE
        return f"{format(dimension.value, 'f')}{dimension.unit}"
    if isinstance(dimension, SizeDimension):
        return dimension.value or NOT_AVAILABLE
    if isinstance(dimension, UnitsDimension):
        return f"{dimension.count or 0} units"
    return NOT_AVAILABLE
