"""Business logic for fill-up management and vehicle marker upkeep."""

import logging
from typing import Any

from core.casting import parse_object_id
from core.exceptions import AuthorizationException, ResourceNotFoundException
from date_utils import get_current_utc_time
from db.models import Fill, Vehicle
from garage.services.aggregation import average_consumption
from garage.services.selection import FillCriteria, select
from garage.services.vehicle_service import VehicleService

logger = logging.getLogger(__name__)


def derive_price_per_liter(amount: float | None, liters: float | None) -> float | None:
    """Unit price from a total amount and a volume, rounded to 3 decimals."""
    if amount is None or not liters or liters <= 0:
        return None
    return round(amount / liters, 3)


class FillService:
    """Service class for fill-up operations."""

    @staticmethod
    async def get_owner_fills(owner: str) -> list[Fill]:
        """All fills recorded by ``owner``, most recent first."""
        return await Fill.find(Fill.owner == owner).sort(-Fill.date).to_list()

    @staticmethod
    async def get_fills(
        owner: str, criteria: FillCriteria | None = None
    ) -> list[Fill]:
        """Get the user's fills filtered and ordered by ``criteria``.

        Args:
            owner: User id
            criteria: Filter/sort selection; defaults to all fills, newest first

        Returns:
            List of Fill documents
        """
        fills = await FillService.get_owner_fills(owner)
        return select(fills, criteria)

    @staticmethod
    async def get_fill(owner: str, fill_id: str) -> Fill:
        """Get one of the user's fills.

        Raises:
            ResourceNotFoundException: If missing or owned by someone else
        """
        fill = await Fill.get(parse_object_id(fill_id, "fill"))
        if not fill or fill.owner != owner:
            msg = "Fill not found"
            raise ResourceNotFoundException(msg)
        return fill

    @staticmethod
    async def _get_owned_fill_for_write(owner: str, fill_id: str, action: str) -> Fill:
        fill = await Fill.get(parse_object_id(fill_id, "fill"))
        if not fill:
            msg = "Fill not found"
            raise ResourceNotFoundException(msg)
        if fill.owner != owner:
            msg = f"You are not allowed to {action} this fill"
            raise AuthorizationException(msg)
        return fill

    @staticmethod
    async def create_fill(
        owner: str, fill_data: dict[str, Any]
    ) -> tuple[Fill, Vehicle]:
        """Create a new fill-up record for one of the user's vehicles.

        The unit price is derived from amount and liters when not given.
        The vehicle's odometer, last fill and computed consumption are
        refreshed afterwards.

        Args:
            owner: User id
            fill_data: Validated fill fields

        Returns:
            Tuple of (created Fill, its Vehicle)
        """
        vehicle = await VehicleService.get_vehicle(owner, fill_data["vehicle_id"])

        if fill_data.get("price_per_liter") is None:
            fill_data["price_per_liter"] = derive_price_per_liter(
                fill_data.get("amount"), fill_data.get("liters")
            )

        now = get_current_utc_time()
        fill = Fill(owner=owner, created_at=now, updated_at=now, **fill_data)
        await fill.insert()
        logger.info("Created fill %s for vehicle %s", fill.id, vehicle.id)

        await FillService.refresh_vehicle_markers(vehicle, fill.odometer)
        return fill, vehicle

    @staticmethod
    async def update_fill(
        owner: str, fill_id: str, update_data: dict[str, Any]
    ) -> tuple[Fill, Vehicle | None]:
        """Apply a partial update to a fill.

        Args:
            owner: User id
            fill_id: Fill id
            update_data: Fields the caller sent (``exclude_unset`` dump)

        Returns:
            Tuple of (updated Fill, its Vehicle or None if it vanished)
        """
        fill = await FillService._get_owned_fill_for_write(owner, fill_id, "modify")

        for key, value in update_data.items():
            setattr(fill, key, value)

        if "price_per_liter" not in update_data and (
            "amount" in update_data or "liters" in update_data
        ):
            derived = derive_price_per_liter(fill.amount, fill.liters)
            if derived is not None:
                fill.price_per_liter = derived

        fill.updated_at = get_current_utc_time()
        await fill.save()

        vehicle = await Vehicle.get(parse_object_id(fill.vehicle_id, "vehicle"))
        if vehicle:
            await FillService.refresh_vehicle_markers(
                vehicle, update_data.get("odometer")
            )
        return fill, vehicle

    @staticmethod
    async def delete_fill(owner: str, fill_id: str) -> dict[str, str]:
        """Delete a fill and recompute its vehicle's last fill marker.

        Returns:
            Success message
        """
        fill = await FillService._get_owned_fill_for_write(owner, fill_id, "delete")
        vehicle_id = fill.vehicle_id

        await fill.delete()
        logger.info("Deleted fill %s of vehicle %s", fill_id, vehicle_id)

        vehicle = await Vehicle.get(parse_object_id(vehicle_id, "vehicle"))
        if vehicle:
            await FillService.refresh_vehicle_markers(vehicle)

        return {"message": "Fill deleted", "fill_id": fill_id}

    @staticmethod
    async def refresh_vehicle_markers(
        vehicle: Vehicle, odometer: float | None = None
    ) -> None:
        """Recompute a vehicle's denormalized fill data.

        Raises the odometer when ``odometer`` is higher than the stored one,
        and recomputes ``last_fill`` and ``computed_consumption`` from the
        vehicle's remaining fills. Failures are logged; the fill write that
        triggered the refresh has already succeeded.
        """
        try:
            fills = (
                await Fill.find(Fill.vehicle_id == str(vehicle.id))
                .sort(-Fill.date)
                .to_list()
            )

            if odometer is not None and (
                vehicle.odometer is None or odometer > vehicle.odometer
            ):
                vehicle.odometer = odometer

            vehicle.last_fill = fills[0].date if fills else None
            vehicle.computed_consumption = average_consumption(fills)
            vehicle.updated_at = get_current_utc_time()
            await vehicle.save()
        except Exception:
            logger.exception("Error refreshing fill markers of vehicle %s", vehicle.id)
