"""API routes for data shared inside a family."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from core.api import api_route
from core.auth import get_current_user_id
from families.services import FamilyDataService
from families.services.family_data_service import DEFAULT_FILLS_PAGE_SIZE
from garage.routes.params import fill_criteria
from garage.services.selection import FillCriteria

logger = logging.getLogger(__name__)
router = APIRouter()

CurrentUser = Annotated[str, Depends(get_current_user_id)]


@router.get("/api/families/{family_id}/vehicles")
@api_route(logger)
async def get_family_vehicles(family_id: str, user_id: CurrentUser) -> dict[str, Any]:
    """Vehicles shared in a family."""
    vehicles = await FamilyDataService.get_vehicles(user_id, family_id)
    return {"vehicles": vehicles, "count": len(vehicles)}


@router.get("/api/families/{family_id}/fills")
@api_route(logger)
async def get_family_fills(
    family_id: str,
    user_id: CurrentUser,
    criteria: Annotated[FillCriteria, Depends(fill_criteria)],
    member_id: Annotated[
        str | None,
        Query(alias="user_id", description="Only fills recorded by this member"),
    ] = None,
    limit: Annotated[
        int, Query(ge=1, le=1000, description="Maximum number of fills to return")
    ] = DEFAULT_FILLS_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0, description="Number of fills to skip")] = 0,
) -> dict[str, Any]:
    """Fills of a family's vehicles, filtered, sorted and paged."""
    fills = await FamilyDataService.get_fills(
        user_id, family_id, criteria, member_id=member_id, limit=limit, offset=offset
    )
    return {"fills": fills, "count": len(fills)}


@router.get("/api/families/{family_id}/summary")
@api_route(logger)
async def get_family_summary(family_id: str, user_id: CurrentUser) -> dict[str, Any]:
    """Dashboard totals and recent activity of a family."""
    return await FamilyDataService.get_summary(user_id, family_id)
