"""Shared query parameters for fill list and statistics routes."""

from typing import Annotated

from fastapi import HTTPException, Query, status
from pydantic import ValidationError

from garage.services.selection import FillCriteria


def fill_criteria(
    vehicle_id: Annotated[
        str | None, Query(description="Vehicle id, or 'all'")
    ] = None,
    year: Annotated[str | None, Query(description="Calendar year, or 'all'")] = None,
    month: Annotated[
        str | None, Query(description="Zero-indexed month (0-11), or 'all'")
    ] = None,
    sort_by: Annotated[
        str, Query(description="date, amount or price_per_liter")
    ] = "date",
    sort_direction: Annotated[str, Query(description="asc or desc")] = "desc",
) -> FillCriteria:
    """Build a FillCriteria from query parameters (422 when invalid)."""
    try:
        return FillCriteria(
            vehicle_id=vehicle_id,
            year=year,
            month=month,
            sort_by=sort_by,
            sort_direction=sort_direction,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e
