"""API routes for fill-up management."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from core.api import api_route
from core.auth import get_current_user_id
from db.schemas import FillCreateModel, FillUpdateModel
from garage.routes.params import fill_criteria
from garage.serializers import serialize_fill
from garage.services import FillService, VehicleService
from garage.services.selection import FillCriteria

logger = logging.getLogger(__name__)
router = APIRouter()

CurrentUser = Annotated[str, Depends(get_current_user_id)]


@router.get("/api/fills")
@api_route(logger)
async def get_fills(
    user_id: CurrentUser,
    criteria: Annotated[FillCriteria, Depends(fill_criteria)],
) -> dict[str, Any]:
    """Get the caller's fills, filtered and sorted."""
    fills = await FillService.get_fills(user_id, criteria)
    names = await VehicleService.get_vehicle_names({f.vehicle_id for f in fills})
    payload = [serialize_fill(f, names.get(f.vehicle_id)) for f in fills]
    return {"fills": payload, "count": len(payload)}


@router.post("/api/fills", status_code=status.HTTP_201_CREATED)
@api_route(logger)
async def create_fill(fill_data: FillCreateModel, user_id: CurrentUser) -> dict[str, Any]:
    """Create a new fill-up record."""
    fill, vehicle = await FillService.create_fill(
        user_id, fill_data.model_dump(exclude_none=True)
    )
    return {
        "fill": serialize_fill(fill, vehicle.display_name),
        "message": "Fill added",
    }


@router.get("/api/fills/{fill_id}")
@api_route(logger)
async def get_fill(fill_id: str, user_id: CurrentUser) -> dict[str, Any]:
    """Get a specific fill-up record."""
    fill = await FillService.get_fill(user_id, fill_id)
    names = await VehicleService.get_vehicle_names({fill.vehicle_id})
    return serialize_fill(fill, names.get(fill.vehicle_id))


@router.patch("/api/fills/{fill_id}")
@api_route(logger)
async def update_fill(
    fill_id: str, fill_data: FillUpdateModel, user_id: CurrentUser
) -> dict[str, Any]:
    """Update a fill-up record with the fields sent."""
    fill, vehicle = await FillService.update_fill(
        user_id, fill_id, fill_data.model_dump(exclude_unset=True)
    )
    return {
        "fill": serialize_fill(fill, vehicle.display_name if vehicle else None),
        "message": "Fill updated",
    }


@router.delete("/api/fills/{fill_id}")
@api_route(logger)
async def delete_fill(fill_id: str, user_id: CurrentUser) -> dict[str, str]:
    """Delete a fill-up record."""
    return await FillService.delete_fill(user_id, fill_id)
