"""Intake normalization for soon-to-be-eligible voter payloads.

Each coerced field has an explicit rule: a parse function and what happens
when parsing fails. ``DROP`` removes the field from the stored document,
``DEFAULT`` stores the rule's default value instead. Normalization is
best-effort and never raises; fields without a rule pass through unchanged.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Tuple

from pydantic import BaseModel, TypeAdapter, ValidationError, field_validator

from ..database.schema import SQLITE_MAX_INTEGER
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Day-first layouts seen on paper rolls, tried after ISO 8601
DAY_FIRST_DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%d.%m.%Y")

_DATE_ADAPTER = TypeAdapter(date)
_DATETIME_ADAPTER = TypeAdapter(datetime)


class CoercionError(ValueError):
    """A single field could not be coerced. Never escapes the normalizer."""


class FailurePolicy(str, Enum):
    DROP = "drop"
    DEFAULT = "default"


class GeoPoint(BaseModel):
    """Canonical point: type tag plus (longitude, latitude)."""
    type: Literal["Point"] = "Point"
    coordinates: Tuple[float, float]

    @field_validator("coordinates", mode="before")
    @classmethod
    def _strict_pair(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError("coordinates must be a pair")
        for component in value:
            if isinstance(component, bool) or not isinstance(component, (int, float)):
                raise ValueError("coordinates must be numeric")
            if not math.isfinite(component):
                raise ValueError("coordinates must be finite")
        return value


def parse_date_of_birth(value: Any) -> str:
    """Parse a date of birth into an ISO date string (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        raise CoercionError(f"Unparseable date: {value!r}")

    text = value.strip()
    for adapter in (_DATE_ADAPTER, _DATETIME_ADAPTER):
        try:
            parsed = adapter.validate_python(text)
        except ValidationError:
            continue
        return (parsed.date() if isinstance(parsed, datetime) else parsed).isoformat()
    for fmt in DAY_FIRST_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    raise CoercionError(f"Unparseable date: {value!r}")


def _finite_number(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise CoercionError(f"Not numeric: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            raise CoercionError(f"Not numeric: {value!r}") from None
    else:
        raise CoercionError(f"Not numeric: {value!r}")
    if not math.isfinite(number):
        raise CoercionError(f"Not finite: {value!r}")
    return number


def parse_part_number(value: Any) -> int:
    """Part numbers are non-negative integers within the store's integer range."""
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        as_float = _finite_number(value)
        if not as_float.is_integer():
            raise CoercionError(f"Part number is not integral: {value!r}")
        number = int(as_float)
    if number < 0:
        raise CoercionError(f"Part number is negative: {value!r}")
    if number > SQLITE_MAX_INTEGER:
        raise CoercionError(f"Part number out of range: {value!r}")
    return number


def parse_age(value: Any) -> int | float:
    number = _finite_number(value)
    return int(number) if number.is_integer() else number


def parse_gender(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CoercionError(f"Not a gender value: {value!r}")
    return value.strip().lower()


def parse_location(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise CoercionError("Location must be an object")
    try:
        point = GeoPoint(coordinates=value.get("coordinates"))
    except ValidationError as e:
        raise CoercionError(f"Invalid location: {e.error_count()} error(s)") from None
    return {"type": point.type, "coordinates": list(point.coordinates)}


@dataclass(frozen=True)
class FieldRule:
    parse: Callable[[Any], Any]
    on_failure: FailurePolicy
    default: Any = None


INTAKE_RULES: Dict[str, FieldRule] = {
    "dateOfBirth": FieldRule(parse_date_of_birth, FailurePolicy.DROP),
    "part": FieldRule(parse_part_number, FailurePolicy.DEFAULT, default=0),
    "age": FieldRule(parse_age, FailurePolicy.DROP),
    "gender": FieldRule(parse_gender, FailurePolicy.DROP),
    "location": FieldRule(parse_location, FailurePolicy.DROP),
}


def normalize_intake(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a raw intake payload into its stored shape.

    Args:
        payload: Raw create body (not modified)

    Returns:
        New dict with coerced fields; fields that failed coercion are either
        dropped or replaced by their rule's default
    """
    normalized = dict(payload)
    adjusted: List[str] = []
    for field, rule in INTAKE_RULES.items():
        if field not in normalized:
            continue
        try:
            normalized[field] = rule.parse(normalized[field])
        except CoercionError as e:
            adjusted.append(field)
            if rule.on_failure is FailurePolicy.DEFAULT:
                normalized[field] = rule.default
                logger.debug(f"Intake field '{field}' defaulted to {rule.default!r}: {e}")
            else:
                del normalized[field]
                logger.debug(f"Intake field '{field}' dropped: {e}")
    if adjusted:
        logger.info(f"Intake payload normalized with adjusted fields: {', '.join(adjusted)}")
    return normalized
