"""Business logic for families: membership, roles and invitations."""

import logging
import uuid
from datetime import timedelta
from typing import Any

from config import INVITE_TOKEN_TTL_DAYS, build_invite_link
from core.casting import parse_object_id
from core.exceptions import (
    AuthorizationException,
    DuplicateResourceException,
    ExpiredResourceException,
    ResourceNotFoundException,
    ValidationException,
)
from date_utils import ensure_utc, get_current_utc_time
from db.models import Family, FamilyMember, FamilyRole, Fill, UserProfile, Vehicle
from db.serializers import serialize_datetime

logger = logging.getLogger(__name__)


class FamilyService:
    """Service class for family operations."""

    @staticmethod
    async def get_family(family_id: str) -> Family:
        """
        Get a family by id.

        Raises:
            ValidationException: If the id is malformed
            ResourceNotFoundException: If the family does not exist
        """
        family = await Family.get(parse_object_id(family_id, "family"))
        if not family:
            msg = "Family not found"
            raise ResourceNotFoundException(msg)
        return family

    @staticmethod
    async def get_membership(family_id: str, user_id: str) -> FamilyMember | None:
        return await FamilyMember.find_one(
            FamilyMember.family_id == family_id,
            FamilyMember.user_id == user_id,
        )

    @staticmethod
    async def require_member(family_id: str, user_id: str) -> FamilyMember:
        """
        Get the caller's membership in a family.

        Raises:
            ValidationException: If the id is malformed
            AuthorizationException: If the caller is not a member
        """
        parse_object_id(family_id, "family")
        membership = await FamilyService.get_membership(family_id, user_id)
        if not membership:
            msg = "User is not a member of this family"
            raise AuthorizationException(msg)
        return membership

    @staticmethod
    async def require_owner(
        family_id: str, user_id: str, action: str
    ) -> FamilyMember:
        """Like ``require_member`` but the caller must hold the owner role."""
        membership = await FamilyService.require_member(family_id, user_id)
        if membership.role != "owner":
            msg = f"Only family owners can {action}"
            raise AuthorizationException(msg)
        return membership

    @staticmethod
    async def _count_owners(family_id: str) -> int:
        return await FamilyMember.find(
            FamilyMember.family_id == family_id,
            FamilyMember.role == "owner",
        ).count()

    @staticmethod
    async def create_family(user_id: str, name: str) -> Family:
        """
        Create a family with the caller as its first owner.

        Args:
            user_id: Creating user
            name: Family name (already stripped)

        Returns:
            Created Family
        """
        family = Family(name=name, owner=user_id)
        await family.insert()
        await FamilyMember(
            family_id=str(family.id), user_id=user_id, role="owner"
        ).insert()

        logger.info("User %s created family %s", user_id, family.id)
        return family

    @staticmethod
    async def list_families(user_id: str) -> list[dict[str, Any]]:
        """Families the user belongs to, with the user's role and member count."""
        memberships = await FamilyMember.find(
            FamilyMember.user_id == user_id
        ).to_list()

        families = []
        for membership in memberships:
            family = await Family.get(parse_object_id(membership.family_id, "family"))
            if not family:
                logger.warning(
                    "Membership %s points to missing family %s",
                    membership.id,
                    membership.family_id,
                )
                continue
            member_count = await FamilyMember.find(
                FamilyMember.family_id == membership.family_id
            ).count()
            families.append(
                {
                    "id": str(family.id),
                    "name": family.name,
                    "owner": family.owner,
                    "created_at": serialize_datetime(family.created_at),
                    "role": membership.role,
                    "joined_at": serialize_datetime(membership.joined_at),
                    "member_count": member_count,
                }
            )

        families.sort(key=lambda f: f["joined_at"] or "")
        return families

    @staticmethod
    async def get_family_details(user_id: str, family_id: str) -> dict[str, Any]:
        """
        Get a family with its members and counts.

        Invite token fields are only shown to owners.

        Returns:
            Dict with ``family``, ``current_user_role``, ``members`` and
            ``statistics``
        """
        membership = await FamilyService.require_member(family_id, user_id)
        family = await FamilyService.get_family(family_id)
        is_owner = membership.role == "owner"

        members = await FamilyMember.find(
            FamilyMember.family_id == family_id
        ).to_list()
        profiles = {
            p.user_id: p
            for p in await UserProfile.find(
                {"user_id": {"$in": [m.user_id for m in members]}}
            ).to_list()
        }

        vehicles = await Vehicle.find(Vehicle.family_id == family_id).to_list()
        fills_count = 0
        if vehicles:
            fills_count = await Fill.find(
                {"vehicle_id": {"$in": [str(v.id) for v in vehicles]}}
            ).count()

        return {
            "family": {
                "id": str(family.id),
                "name": family.name,
                "owner": family.owner,
                "created_at": serialize_datetime(family.created_at),
                "invite_token": family.invite_token if is_owner else None,
                "invite_token_expires": (
                    serialize_datetime(family.invite_token_expires)
                    if is_owner
                    else None
                ),
                "invite_token_used": family.invite_token_used if is_owner else None,
            },
            "current_user_role": membership.role,
            "members": [
                {
                    "user_id": m.user_id,
                    "full_name": (
                        profiles[m.user_id].full_name
                        if m.user_id in profiles and profiles[m.user_id].full_name
                        else "Unknown"
                    ),
                    "email": profiles[m.user_id].email if m.user_id in profiles else None,
                    "role": m.role,
                    "joined_at": serialize_datetime(m.joined_at),
                }
                for m in members
            ],
            "statistics": {
                "vehicles_count": len(vehicles),
                "fills_count": fills_count,
            },
        }

    @staticmethod
    async def rename_family(user_id: str, family_id: str, name: str) -> Family:
        """Rename a family (owners only)."""
        await FamilyService.require_owner(family_id, user_id, "rename the family")
        family = await FamilyService.get_family(family_id)
        family.name = name
        await family.save()

        logger.info("Family %s renamed by %s", family_id, user_id)
        return family

    @staticmethod
    async def delete_family(user_id: str, family_id: str) -> dict[str, str]:
        """
        Delete a family (owners only).

        Memberships are removed and the family's vehicles are detached but
        kept in their owners' garages.
        """
        await FamilyService.require_owner(family_id, user_id, "delete the family")
        family = await FamilyService.get_family(family_id)

        await Vehicle.find(Vehicle.family_id == family_id).update(
            {"$set": {"family_id": None}}
        )
        await FamilyMember.find(FamilyMember.family_id == family_id).delete()
        await family.delete()

        logger.info("Family %s deleted by %s", family_id, user_id)
        return {"message": "Family deleted"}

    @staticmethod
    async def generate_invite(user_id: str, family_id: str) -> dict[str, Any]:
        """
        Issue a new single-use invite token, replacing any previous one.

        Returns:
            Dict with ``invite_token``, ``expires_at`` and ``invite_link``
        """
        await FamilyService.require_owner(family_id, user_id, "generate invites")
        family = await FamilyService.get_family(family_id)

        family.invite_token = str(uuid.uuid4())
        family.invite_token_expires = get_current_utc_time() + timedelta(
            days=INVITE_TOKEN_TTL_DAYS
        )
        family.invite_token_used = False
        await family.save()

        logger.info("New invite token issued for family %s", family_id)
        return {
            "invite_token": family.invite_token,
            "expires_at": serialize_datetime(family.invite_token_expires),
            "invite_link": build_invite_link(family.invite_token),
        }

    @staticmethod
    async def join_family(user_id: str, code: str) -> Family:
        """
        Redeem an invite code and join its family as a member.

        Raises:
            ResourceNotFoundException: Unknown code
            ExpiredResourceException: Code past its expiry
            DuplicateResourceException: Code already used, or caller is
                already a member
        """
        family = await Family.find_one(Family.invite_token == code)
        if not family:
            msg = "Invalid invite code"
            raise ResourceNotFoundException(msg)

        expires = ensure_utc(family.invite_token_expires)
        if expires is not None and expires < get_current_utc_time():
            msg = "Invite code has expired"
            raise ExpiredResourceException(msg)

        family_id = str(family.id)
        if await FamilyService.get_membership(family_id, user_id):
            msg = "You are already a member of this family"
            raise DuplicateResourceException(msg)

        # Claim the token in one write so concurrent redemptions cannot both win.
        claim = await Family.get_motor_collection().update_one(
            {"_id": family.id, "invite_token": code, "invite_token_used": False},
            {"$set": {"invite_token_used": True}},
        )
        if claim.modified_count == 0:
            msg = "Invite code has already been used"
            raise DuplicateResourceException(msg)
        family.invite_token_used = True

        await FamilyMember(family_id=family_id, user_id=user_id, role="member").insert()

        logger.info("User %s joined family %s", user_id, family_id)
        return family

    @staticmethod
    async def leave_family(user_id: str, family_id: str) -> dict[str, str]:
        """
        Leave a family.

        Raises:
            ValidationException: If the caller is its only owner
        """
        membership = await FamilyService.require_member(family_id, user_id)
        if membership.role == "owner" and await FamilyService._count_owners(
            family_id
        ) <= 1:
            msg = (
                "You are the only owner of this family. Promote another member "
                "or delete the family instead."
            )
            raise ValidationException(msg)

        await membership.delete()
        logger.info("User %s left family %s", user_id, family_id)
        return {"message": "You have left the family"}

    @staticmethod
    async def change_member_role(
        user_id: str, family_id: str, member_id: str, role: FamilyRole
    ) -> FamilyMember:
        """
        Set a member's role (owners only).

        Raises:
            ResourceNotFoundException: If the target is not a member
            ValidationException: If it would leave the family without owner
        """
        await FamilyService.require_owner(family_id, user_id, "change roles")
        target = await FamilyService.get_membership(family_id, member_id)
        if not target:
            msg = "Member not found"
            raise ResourceNotFoundException(msg)

        if target.role == "owner" and role != "owner":
            if await FamilyService._count_owners(family_id) <= 1:
                msg = "A family must keep at least one owner"
                raise ValidationException(msg)

        target.role = role
        await target.save()

        logger.info(
            "User %s set role of %s to %s in family %s",
            user_id,
            member_id,
            role,
            family_id,
        )
        return target

    @staticmethod
    async def remove_member(
        user_id: str, family_id: str, member_id: str
    ) -> dict[str, str]:
        """
        Remove another member from a family (owners only).

        Raises:
            ValidationException: If the caller targets themselves (use leave)
            ResourceNotFoundException: If the target is not a member
        """
        await FamilyService.require_owner(family_id, user_id, "remove members")
        if member_id == user_id:
            msg = "Use the leave endpoint to leave a family"
            raise ValidationException(msg)

        target = await FamilyService.get_membership(family_id, member_id)
        if not target:
            msg = "Member not found"
            raise ResourceNotFoundException(msg)

        await target.delete()
        logger.info(
            "User %s removed %s from family %s", user_id, member_id, family_id
        )
        return {"message": "Member removed"}
