"""API routes for family management, invitations and membership."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from core.api import api_route
from core.auth import get_current_user_id
from db.schemas import (
    FamilyCreateModel,
    FamilyJoinModel,
    FamilyRenameModel,
    MemberRoleModel,
)
from families.serializers import serialize_family, serialize_member
from families.services import FamilyService

logger = logging.getLogger(__name__)
router = APIRouter()

CurrentUser = Annotated[str, Depends(get_current_user_id)]


@router.post("/api/families", status_code=status.HTTP_201_CREATED)
@api_route(logger)
async def create_family(
    family_data: FamilyCreateModel, user_id: CurrentUser
) -> dict[str, Any]:
    """Create a family owned by the caller."""
    family = await FamilyService.create_family(user_id, family_data.name)
    return {"family": serialize_family(family), "message": "Family created"}


@router.get("/api/families")
@api_route(logger)
async def list_families(user_id: CurrentUser) -> dict[str, Any]:
    """List the families the caller belongs to."""
    families = await FamilyService.list_families(user_id)
    return {"families": families, "count": len(families)}


@router.post("/api/families/join")
@api_route(logger)
async def join_family(join_data: FamilyJoinModel, user_id: CurrentUser) -> dict[str, Any]:
    """Join a family with an invite code."""
    family = await FamilyService.join_family(user_id, join_data.code)
    return {"family": serialize_family(family), "message": "Joined family"}


@router.get("/api/families/{family_id}")
@api_route(logger)
async def get_family(family_id: str, user_id: CurrentUser) -> dict[str, Any]:
    """Get a family with its members."""
    return await FamilyService.get_family_details(user_id, family_id)


@router.patch("/api/families/{family_id}")
@api_route(logger)
async def rename_family(
    family_id: str, family_data: FamilyRenameModel, user_id: CurrentUser
) -> dict[str, Any]:
    """Rename a family."""
    family = await FamilyService.rename_family(user_id, family_id, family_data.name)
    return {"family": serialize_family(family), "message": "Family renamed"}


@router.delete("/api/families/{family_id}")
@api_route(logger)
async def delete_family(family_id: str, user_id: CurrentUser) -> dict[str, str]:
    """Delete a family."""
    return await FamilyService.delete_family(user_id, family_id)


@router.post("/api/families/{family_id}/invite")
@api_route(logger)
async def generate_invite(family_id: str, user_id: CurrentUser) -> dict[str, Any]:
    """Issue a new invite code for a family."""
    return await FamilyService.generate_invite(user_id, family_id)


@router.post("/api/families/{family_id}/leave")
@api_route(logger)
async def leave_family(family_id: str, user_id: CurrentUser) -> dict[str, str]:
    """Leave a family."""
    return await FamilyService.leave_family(user_id, family_id)


@router.patch("/api/families/{family_id}/members/{member_id}")
@api_route(logger)
async def change_member_role(
    family_id: str,
    member_id: str,
    role_data: MemberRoleModel,
    user_id: CurrentUser,
) -> dict[str, Any]:
    """Change the role of a family member."""
    member = await FamilyService.change_member_role(
        user_id, family_id, member_id, role_data.role
    )
    return {"member": serialize_member(member), "message": "Role updated"}


@router.delete("/api/families/{family_id}/members/{member_id}")
@api_route(logger)
async def remove_member(
    family_id: str, member_id: str, user_id: CurrentUser
) -> dict[str, str]:
    """Remove a member from a family."""
    return await FamilyService.remove_member(user_id, family_id, member_id)
