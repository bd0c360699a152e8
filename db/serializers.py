"""Serialization utilities for MongoDB documents.

Provides functions for converting Beanie documents and MongoDB types to
JSON-serializable formats.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from beanie import Document
from bson import ObjectId

from date_utils import ensure_utc


def serialize_datetime(dt: datetime | None) -> str | None:
    """Serialize a datetime to an ISO string with a Z suffix for UTC."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def serialize_for_json(data: Any) -> Any:
    """Recursively serialize MongoDB types for JSON compatibility.

    Converts ObjectId to string and datetime to ISO format.
    Handles nested dicts and lists.
    """
    if isinstance(data, dict):
        return {k: serialize_for_json(v) for k, v in data.items()}
    if isinstance(data, list):
        return [serialize_for_json(item) for item in data]
    if isinstance(data, ObjectId):
        return str(data)
    if isinstance(data, datetime):
        return serialize_datetime(data)
    return data


def serialize_document(doc: Document | dict[str, Any] | None) -> dict[str, Any]:
    """Serialize a Beanie document (or raw dict) for a JSON response.

    The document id is exposed as ``id``.
    """
    if not doc:
        return {}
    if isinstance(doc, Document):
        data = doc.model_dump()
        data["id"] = doc.id
    else:
        data = dict(doc)
        if "_id" in data:
            data["id"] = data.pop("_id")
    data.pop("revision_id", None)
    return serialize_for_json(data)
