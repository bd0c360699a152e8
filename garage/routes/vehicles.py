"""API routes for garage vehicle management."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from core.api import api_route
from core.auth import get_current_user_id
from db.schemas import VehicleCreateModel, VehicleUpdateModel
from garage.serializers import serialize_vehicle
from garage.services import VehicleService

logger = logging.getLogger(__name__)
router = APIRouter()

CurrentUser = Annotated[str, Depends(get_current_user_id)]


@router.get("/api/vehicles")
@api_route(logger)
async def get_vehicles(user_id: CurrentUser) -> list[dict[str, Any]]:
    """Get the caller's vehicles."""
    vehicles = await VehicleService.get_vehicles(user_id)
    return [serialize_vehicle(v) for v in vehicles]


@router.post("/api/vehicles", status_code=status.HTTP_201_CREATED)
@api_route(logger)
async def create_vehicle(
    vehicle_data: VehicleCreateModel, user_id: CurrentUser
) -> dict[str, Any]:
    """Create a new vehicle."""
    vehicle = await VehicleService.create_vehicle(
        user_id, vehicle_data.model_dump(exclude_none=True)
    )
    return serialize_vehicle(vehicle)


@router.get("/api/vehicles/{vehicle_id}")
@api_route(logger)
async def get_vehicle(vehicle_id: str, user_id: CurrentUser) -> dict[str, Any]:
    """Get one of the caller's vehicles."""
    vehicle = await VehicleService.get_vehicle(user_id, vehicle_id)
    return serialize_vehicle(vehicle)


@router.patch("/api/vehicles/{vehicle_id}")
@api_route(logger)
async def update_vehicle(
    vehicle_id: str, vehicle_data: VehicleUpdateModel, user_id: CurrentUser
) -> dict[str, Any]:
    """Update a vehicle's information."""
    vehicle = await VehicleService.update_vehicle(
        user_id, vehicle_id, vehicle_data.model_dump(exclude_unset=True)
    )
    return serialize_vehicle(vehicle)


@router.delete("/api/vehicles/{vehicle_id}")
@api_route(logger)
async def delete_vehicle(vehicle_id: str, user_id: CurrentUser) -> dict[str, str]:
    """Delete a vehicle and its fills."""
    return await VehicleService.delete_vehicle(user_id, vehicle_id)
