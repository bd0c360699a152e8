"""API routes for fill dashboards."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from core.api import api_route
from core.auth import get_current_user_id
from garage.routes.params import fill_criteria
from garage.services import StatisticsService
from garage.services.aggregation import chart_months
from garage.services.selection import FillCriteria

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/fills/statistics")
@api_route(logger)
async def get_fill_statistics(
    user_id: Annotated[str, Depends(get_current_user_id)],
    criteria: Annotated[FillCriteria, Depends(fill_criteria)],
    compact: Annotated[
        bool, Query(description="Show 6 months instead of 12")
    ] = False,
    months: Annotated[
        int | None, Query(ge=1, le=120, description="Explicit chart window")
    ] = None,
) -> dict[str, Any]:
    """Get monthly chart data and headline statistics."""
    window = months if months is not None else chart_months(compact)
    return await StatisticsService.get_statistics(user_id, criteria, window)
