"""
Pydantic request models for API validation.

Create models declare required fields; update models are fully optional and
are dumped with ``exclude_unset=True`` so only the fields the caller sent are
applied.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from date_utils import to_fill_day


def _parse_day(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    parsed = to_fill_day(value)
    if parsed is None:
        msg = f"Invalid date value: {value!r}"
        raise ValueError(msg)
    return parsed


# ============================================================================
# Vehicles
# ============================================================================


class VehicleCreateModel(BaseModel):
    """Model for creating a vehicle."""

    name: str = Field(..., min_length=1)
    make: str | None = None
    model: str | None = None
    year: int | None = Field(None, ge=1886, le=2100)
    fuel_type: str | None = None
    manufacturer_consumption: float | None = Field(None, ge=0)
    odometer: float | None = Field(None, ge=0)
    plate: str | None = None
    family_id: str | None = None


class VehicleUpdateModel(BaseModel):
    """Model for partially updating a vehicle."""

    name: str | None = Field(None, min_length=1)
    make: str | None = None
    model: str | None = None
    year: int | None = Field(None, ge=1886, le=2100)
    fuel_type: str | None = None
    manufacturer_consumption: float | None = Field(None, ge=0)
    odometer: float | None = Field(None, ge=0)
    plate: str | None = None
    family_id: str | None = None


# ============================================================================
# Fills
# ============================================================================


class FillCreateModel(BaseModel):
    """Model for creating a new fill-up record."""

    vehicle_id: str = Field(..., min_length=1)
    date: datetime
    odometer: float | None = Field(None, ge=0)
    liters: float | None = Field(None, gt=0)
    amount: float | None = Field(None, ge=0)
    price_per_liter: float | None = Field(None, ge=0)
    is_full: bool = True
    notes: str | None = None

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def coerce_vehicle_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return _parse_day(v)


class FillUpdateModel(BaseModel):
    """Model for partially updating a fill-up record.

    ``vehicle_id`` and ``owner`` are not editable.
    """

    date: datetime | None = None
    odometer: float | None = Field(None, ge=0)
    liters: float | None = Field(None, gt=0)
    amount: float | None = Field(None, ge=0)
    price_per_liter: float | None = Field(None, ge=0)
    is_full: bool = True
    notes: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        if v is None:
            msg = "date cannot be null"
            raise ValueError(msg)
        return _parse_day(v)

    @field_validator("is_full", mode="before")
    @classmethod
    def reject_null_flag(cls, v: Any) -> Any:
        if v is None:
            msg = "is_full cannot be null"
            raise ValueError(msg)
        return v


# ============================================================================
# Families
# ============================================================================


class FamilyCreateModel(BaseModel):
    """Model for creating a family."""

    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Family name is required and must be a non-empty string"
            raise ValueError(msg)
        return v


class FamilyRenameModel(FamilyCreateModel):
    """Model for renaming a family."""


class FamilyJoinModel(BaseModel):
    """Model for redeeming an invite code."""

    code: str

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Invite code is required and must be a non-empty string"
            raise ValueError(msg)
        return v


class MemberRoleModel(BaseModel):
    """Model for changing a member's role."""

    role: Literal["owner", "member"]
