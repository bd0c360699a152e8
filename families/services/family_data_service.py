"""Shared vehicles, fills and dashboard summary of a family."""

import logging
from typing import Any

from date_utils import normalize_calendar_date
from db.models import Fill, UserProfile, Vehicle
from families.services.family_service import FamilyService
from garage.serializers import serialize_fill, serialize_vehicle
from garage.services.aggregation import aggregate
from garage.services.selection import FillCriteria, select

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10
DEFAULT_FILLS_PAGE_SIZE = 100


async def _owner_names(user_ids: set[str]) -> dict[str, str]:
    profiles = await UserProfile.find({"user_id": {"$in": list(user_ids)}}).to_list()
    return {p.user_id: p.full_name for p in profiles if p.full_name}


class FamilyDataService:
    """Service class for data shared inside a family."""

    @staticmethod
    async def _family_vehicles(family_id: str) -> list[Vehicle]:
        return await Vehicle.find(Vehicle.family_id == family_id).to_list()

    @staticmethod
    async def _family_fills(vehicles: list[Vehicle]) -> list[Fill]:
        if not vehicles:
            return []
        return (
            await Fill.find({"vehicle_id": {"$in": [str(v.id) for v in vehicles]}})
            .sort(-Fill.date)
            .to_list()
        )

    @staticmethod
    async def get_vehicles(user_id: str, family_id: str) -> list[dict[str, Any]]:
        """Vehicles shared in a family, by display name, with owner names."""
        await FamilyService.require_member(family_id, user_id)
        vehicles = await FamilyDataService._family_vehicles(family_id)
        names = await _owner_names({v.owner for v in vehicles})

        result = []
        for vehicle in sorted(vehicles, key=lambda v: v.display_name.lower()):
            data = serialize_vehicle(vehicle)
            data["owner_name"] = names.get(vehicle.owner)
            result.append(data)
        return result

    @staticmethod
    async def get_fills(
        user_id: str,
        family_id: str,
        criteria: FillCriteria | None = None,
        member_id: str | None = None,
        limit: int = DEFAULT_FILLS_PAGE_SIZE,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Fills of the family's vehicles, filtered and sorted by ``criteria``.

        Args:
            user_id: Calling member
            family_id: Family id
            criteria: Vehicle/year/month filters and sort order
            member_id: Only fills recorded by this member
            limit: Maximum number of fills returned
            offset: Number of fills skipped after sorting

        Returns:
            One page of serialized fills with vehicle and user names
        """
        await FamilyService.require_member(family_id, user_id)
        vehicles = await FamilyDataService._family_vehicles(family_id)
        fills = await FamilyDataService._family_fills(vehicles)
        if member_id:
            fills = [f for f in fills if f.owner == member_id]
        fills = select(fills, criteria)[offset : offset + limit]

        vehicle_names = {str(v.id): v.display_name for v in vehicles}
        user_names = await _owner_names({f.owner for f in fills})
        result = []
        for fill in fills:
            data = serialize_fill(fill, vehicle_names.get(fill.vehicle_id))
            data["user_name"] = user_names.get(fill.owner)
            result.append(data)
        return result

    @staticmethod
    async def get_summary(user_id: str, family_id: str) -> dict[str, Any]:
        """
        Dashboard summary of a family.

        Args:
            user_id: Calling member
            family_id: Family id

        Returns:
            Dict with ``summary`` totals and the ``recent_activity`` list
            (latest fills first)
        """
        await FamilyService.require_member(family_id, user_id)
        vehicles = await FamilyDataService._family_vehicles(family_id)
        fills = await FamilyDataService._family_fills(vehicles)
        stats = aggregate(fills).stats

        recent = fills[:RECENT_ACTIVITY_LIMIT]
        vehicle_names = {str(v.id): v.display_name for v in vehicles}
        user_names = await _owner_names({f.owner for f in recent})

        logger.debug(
            "Family %s summary over %d vehicles and %d fills",
            family_id,
            len(vehicles),
            len(fills),
        )
        return {
            "summary": {
                "total_vehicles": len(vehicles),
                "total_fills": stats.total_fills,
                "total_liters": stats.total_liters,
                "total_spent": stats.total_cost,
                "last_fill_date": stats.last_fill_date,
                "average_consumption": stats.avg_consumption,
            },
            "recent_activity": [
                {
                    "fill_id": str(fill.id),
                    "vehicle_id": fill.vehicle_id,
                    "vehicle_name": vehicle_names.get(fill.vehicle_id),
                    "user_id": fill.owner,
                    "user_name": user_names.get(fill.owner),
                    "fill_date": normalize_calendar_date(fill.date),
                    "liters": fill.liters,
                    "amount": fill.amount,
                    "odometer": fill.odometer,
                }
                for fill in recent
            ],
        }
