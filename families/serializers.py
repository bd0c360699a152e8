"""Serialization utilities for family data."""

from typing import Any

from db.models import Family, FamilyMember
from db.serializers import serialize_datetime


def serialize_family(family: Family) -> dict[str, Any]:
    """Public view of a family; invite token fields are left out."""
    return {
        "id": str(family.id),
        "name": family.name,
        "owner": family.owner,
        "created_at": serialize_datetime(family.created_at),
    }


def serialize_member(member: FamilyMember) -> dict[str, Any]:
    return {
        "family_id": member.family_id,
        "user_id": member.user_id,
        "role": member.role,
        "joined_at": serialize_datetime(member.joined_at),
    }
