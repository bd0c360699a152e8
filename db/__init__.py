"""Database package for MongoDB operations using Beanie ODM.

Modules:
    manager: DatabaseManager singleton for connection handling
    models: Beanie Document models for all collections
    schemas: Pydantic request models
    serializers: JSON serialization helpers

Usage:
    from db.models import Fill, Vehicle

    fills = await Fill.find(Fill.owner == user_id).to_list()
"""

from __future__ import annotations

from db.manager import DatabaseManager, db_manager
from db.models import (
    ALL_DOCUMENT_MODELS,
    Family,
    FamilyMember,
    Fill,
    ServerLog,
    UserProfile,
    Vehicle,
)
from db.serializers import serialize_datetime, serialize_document, serialize_for_json


async def init_database() -> None:
    """Connect to MongoDB and bind all document models."""
    await db_manager.init_beanie()


__all__ = [
    "ALL_DOCUMENT_MODELS",
    "DatabaseManager",
    "Family",
    "FamilyMember",
    "Fill",
    "ServerLog",
    "UserProfile",
    "Vehicle",
    "db_manager",
    "init_database",
    "serialize_datetime",
    "serialize_document",
    "serialize_for_json",
]
