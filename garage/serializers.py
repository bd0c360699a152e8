"""Serialization utilities for garage data."""

from typing import Any

from date_utils import normalize_calendar_date
from db.models import Fill, Vehicle
from db.serializers import serialize_datetime, serialize_document


def serialize_fill(fill: Fill, vehicle_name: str | None = None) -> dict[str, Any]:
    """Fill as JSON with a calendar ``date`` and the vehicle's display name."""
    data = serialize_document(fill)
    data["date"] = normalize_calendar_date(fill.date)
    data["vehicle_name"] = vehicle_name
    return data


def serialize_vehicle(vehicle: Vehicle) -> dict[str, Any]:
    """Vehicle as JSON; ``last_fill`` is a calendar date."""
    data = serialize_document(vehicle)
    data["last_fill"] = normalize_calendar_date(vehicle.last_fill)
    data["display_name"] = vehicle.display_name
    data["created_at"] = serialize_datetime(vehicle.created_at)
    return data
