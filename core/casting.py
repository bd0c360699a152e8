from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from bson import ObjectId

from core.exceptions import ValidationException


def optional_float(value: Any) -> float | None:
    """Coerce value to a finite float, or None when it is missing or invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def safe_float(value: Any, default: float = 0.0) -> float:
    """Coerce value to float with a default."""
    number = optional_float(value)
    return default if number is None else number


def record_value(record: Any, field: str) -> Any:
    """Read a field from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def parse_object_id(value: Any, label: str) -> ObjectId:
    """Return ``value`` as an ObjectId or raise a 400-mapped error."""
    if not ObjectId.is_valid(value):
        msg = f"Invalid {label} ID"
        raise ValidationException(msg)
    return ObjectId(value)
