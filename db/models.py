"""Beanie ODM document models for MongoDB collections.

This module defines all document models using Beanie ODM, which provides:
- Automatic Pydantic validation
- Built-in async CRUD operations
- Proper ObjectId/datetime serialization
- Index definitions at the model level

Usage:
    from db.models import Fill, Vehicle

    # Latest fills of a vehicle
    fills = await Fill.find(Fill.vehicle_id == vehicle_id).sort(-Fill.date).to_list()

    # Insert a new document
    vehicle = Vehicle(owner="user-1", name="Clio")
    await vehicle.insert()
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from beanie import Document, Indexed
from pydantic import Field, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from date_utils import get_current_utc_time, parse_timestamp, to_fill_day

FamilyRole = Literal["owner", "member"]


class Vehicle(Document):
    """Vehicle document for a user's garage."""

    owner: str
    family_id: str | None = None
    name: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    fuel_type: str | None = None
    manufacturer_consumption: float | None = None
    odometer: float | None = None
    plate: str | None = None
    last_fill: datetime | None = None
    computed_consumption: float | None = None
    created_at: datetime = Field(default_factory=get_current_utc_time)
    updated_at: datetime = Field(default_factory=get_current_utc_time)

    class Settings:
        name = "vehicles"
        indexes = [
            IndexModel(
                [("owner", ASCENDING), ("created_at", DESCENDING)],
                name="vehicles_owner_created_idx",
            ),
            IndexModel(
                [("family_id", ASCENDING)], name="vehicles_family_idx", sparse=True
            ),
        ]

    class Config:
        extra = "allow"

    @property
    def display_name(self) -> str:
        """Name shown in lists: explicit name, else make/model, else the id."""
        if self.name:
            return self.name
        label = f"{self.make or ''} {self.model or ''}".strip()
        if label:
            return label
        return f"Vehicle #{self.id}"


class Fill(Document):
    """Fuel fill-up record document."""

    vehicle_id: Indexed(str)
    owner: Indexed(str)
    date: datetime
    odometer: float | None = None
    liters: float | None = None
    amount: float | None = None
    price_per_liter: float | None = None
    is_full: bool = True
    notes: str | None = None
    created_at: datetime = Field(default_factory=get_current_utc_time)
    updated_at: datetime = Field(default_factory=get_current_utc_time)

    @field_validator("date", mode="before")
    @classmethod
    def parse_fill_date(cls, v: Any) -> datetime:
        """Store fill dates as UTC midnight of the calendar day."""
        parsed = to_fill_day(v)
        if parsed is None:
            msg = f"Invalid fill date: {v!r}"
            raise ValueError(msg)
        return parsed

    class Settings:
        name = "fills"
        indexes = [
            IndexModel(
                [("vehicle_id", ASCENDING), ("date", DESCENDING)],
                name="fills_vehicle_date_idx",
            ),
            IndexModel(
                [("owner", ASCENDING), ("date", DESCENDING)],
                name="fills_owner_date_idx",
            ),
        ]

    class Config:
        extra = "allow"


class Family(Document):
    """Sharing group of users."""

    name: str
    owner: str
    created_at: datetime = Field(default_factory=get_current_utc_time)
    invite_token: str | None = None
    invite_token_expires: datetime | None = None
    invite_token_used: bool = False

    @field_validator("invite_token_expires", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> datetime | None:
        if v is None:
            return None
        return parse_timestamp(v)

    class Settings:
        name = "families"
        indexes = [
            IndexModel(
                [("invite_token", ASCENDING)],
                name="families_invite_token_idx",
                sparse=True,
            ),
        ]


class FamilyMember(Document):
    """Membership of a user in a family."""

    family_id: str
    user_id: str
    role: FamilyRole = "member"
    joined_at: datetime = Field(default_factory=get_current_utc_time)

    class Settings:
        name = "family_members"
        indexes = [
            IndexModel(
                [("family_id", ASCENDING), ("user_id", ASCENDING)],
                name="family_members_family_user_idx",
                unique=True,
            ),
            IndexModel([("user_id", ASCENDING)], name="family_members_user_idx"),
        ]


class UserProfile(Document):
    """Display profile of a user, maintained by the authentication layer."""

    user_id: Indexed(str, unique=True)
    full_name: str | None = None
    email: str | None = None

    class Settings:
        name = "users_profile"


class ServerLog(Document):
    """Server log document for MongoDB logging handler."""

    timestamp: datetime | None = None
    level: str | None = None
    logger: str | None = None
    message: str | None = None
    module: str | None = None
    function: str | None = None
    line: int | None = None
    exception: str | None = None

    class Settings:
        name = "server_logs"
        indexes = [
            IndexModel([("level", ASCENDING)], name="server_logs_level_idx"),
            IndexModel(
                [("timestamp", ASCENDING)],
                name="server_logs_ttl_idx",
                expireAfterSeconds=30 * 24 * 60 * 60,
            ),
        ]

    class Config:
        extra = "allow"


# List of all document models for Beanie initialization
ALL_DOCUMENT_MODELS = [
    Vehicle,
    Fill,
    Family,
    FamilyMember,
    UserProfile,
    ServerLog,
]
