"""Business logic for garage vehicle management."""

import logging
from typing import Any

from bson import ObjectId

from core.casting import parse_object_id
from core.exceptions import AuthorizationException, ResourceNotFoundException
from date_utils import get_current_utc_time
from db.models import FamilyMember, Fill, Vehicle

logger = logging.getLogger(__name__)


class VehicleService:
    """Service class for vehicle operations."""

    @staticmethod
    async def get_vehicles(owner: str) -> list[Vehicle]:
        """
        Get the vehicles of a user, newest first.

        Args:
            owner: User id

        Returns:
            List of Vehicle models
        """
        vehicles = (
            await Vehicle.find(Vehicle.owner == owner)
            .sort(-Vehicle.created_at)
            .to_list()
        )
        logger.info("Fetched %d vehicles for user %s", len(vehicles), owner)
        return vehicles

    @staticmethod
    async def get_vehicle(owner: str, vehicle_id: str) -> Vehicle:
        """
        Get one vehicle owned by ``owner``.

        Raises:
            ValidationException: If the id is malformed
            ResourceNotFoundException: If the vehicle does not exist or
                belongs to someone else
        """
        vehicle = await Vehicle.get(parse_object_id(vehicle_id, "vehicle"))
        if not vehicle or vehicle.owner != owner:
            msg = "Vehicle not found or you are not its owner"
            raise ResourceNotFoundException(msg)
        return vehicle

    @staticmethod
    async def get_vehicle_names(vehicle_ids: set[str]) -> dict[str, str]:
        """Map vehicle ids to display names; unknown ids are omitted."""
        object_ids = [ObjectId(v) for v in vehicle_ids if ObjectId.is_valid(v)]
        if not object_ids:
            return {}
        vehicles = await Vehicle.find({"_id": {"$in": object_ids}}).to_list()
        return {str(v.id): v.display_name for v in vehicles}

    @staticmethod
    async def _check_family(owner: str, family_id: str | None) -> None:
        if not family_id:
            return
        membership = await FamilyMember.find_one(
            FamilyMember.family_id == family_id,
            FamilyMember.user_id == owner,
        )
        if not membership:
            msg = "You are not a member of this family"
            raise AuthorizationException(msg)

    @staticmethod
    async def create_vehicle(owner: str, vehicle_data: dict[str, Any]) -> Vehicle:
        """
        Create a new vehicle in the user's garage.

        Args:
            owner: User id
            vehicle_data: Validated vehicle fields

        Returns:
            Created Vehicle model
        """
        await VehicleService._check_family(owner, vehicle_data.get("family_id"))

        now = get_current_utc_time()
        vehicle = Vehicle(owner=owner, created_at=now, updated_at=now, **vehicle_data)
        await vehicle.insert()

        logger.info("Created vehicle %s for user %s", vehicle.id, owner)
        return vehicle

    @staticmethod
    async def update_vehicle(
        owner: str, vehicle_id: str, update_data: dict[str, Any]
    ) -> Vehicle:
        """
        Update a vehicle's information.

        Args:
            owner: User id
            vehicle_id: Vehicle id
            update_data: Fields the caller sent

        Returns:
            Updated Vehicle model
        """
        vehicle = await VehicleService.get_vehicle(owner, vehicle_id)

        if "family_id" in update_data:
            await VehicleService._check_family(owner, update_data["family_id"])

        for key, value in update_data.items():
            setattr(vehicle, key, value)
        vehicle.updated_at = get_current_utc_time()
        await vehicle.save()

        return vehicle

    @staticmethod
    async def delete_vehicle(owner: str, vehicle_id: str) -> dict[str, str]:
        """
        Delete a vehicle together with its fills.

        Returns:
            Success message
        """
        vehicle = await VehicleService.get_vehicle(owner, vehicle_id)

        result = await Fill.find(Fill.vehicle_id == str(vehicle.id)).delete()
        deleted_fills = result.deleted_count if result else 0
        await vehicle.delete()

        logger.info(
            "Deleted vehicle %s and %d fills for user %s",
            vehicle_id,
            deleted_fills,
            owner,
        )
        return {"status": "success", "message": "Vehicle deleted"}
