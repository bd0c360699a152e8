"""Service for fill dashboards: monthly charts and headline statistics."""

import logging
from collections.abc import Sequence
from typing import Any

from garage.services.aggregation import (
    aggregate,
    chart_months,
    odometer_series,
    recent_months,
)
from garage.services.fill_service import FillService
from garage.services.selection import FillCriteria, filter_fills
from garage.services.vehicle_service import VehicleService

logger = logging.getLogger(__name__)


class StatisticsService:
    """Service class for fill statistics."""

    @staticmethod
    def summarize(
        fills: Sequence[Any],
        criteria: FillCriteria | None = None,
        months: int | None = None,
        vehicle_names: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Build the dashboard payload from a snapshot of fills.

        Args:
            fills: Fill records in any order
            criteria: Filters applied before aggregating (sort is irrelevant)
            months: Number of most recent months to keep in the chart
            vehicle_names: Display names for the per-vehicle odometer series

        Returns:
            Dict with ``monthly_chart``, ``stats`` and ``vehicles``
        """
        scoped = filter_fills(fills, criteria or FillCriteria())
        aggregation = aggregate(scoped)
        window = chart_months() if months is None else months
        names = vehicle_names or {}

        return {
            "monthly_chart": [
                point.model_dump()
                for point in recent_months(aggregation.monthly_series, window)
            ],
            "stats": aggregation.stats.model_dump(),
            "vehicles": [
                {
                    "vehicle_id": vehicle_id,
                    "vehicle_name": names.get(vehicle_id),
                    "points": [point.model_dump() for point in points],
                }
                for vehicle_id, points in sorted(odometer_series(scoped).items())
            ],
        }

    @staticmethod
    async def get_statistics(
        owner: str,
        criteria: FillCriteria | None = None,
        months: int | None = None,
    ) -> dict[str, Any]:
        """Get chart data and statistics for a user's fills.

        Args:
            owner: User id
            criteria: Optional vehicle/year/month filters
            months: Chart window in months (default 12)

        Returns:
            Dashboard payload (see ``summarize``)
        """
        fills = await FillService.get_owner_fills(owner)
        names = await VehicleService.get_vehicle_names({f.vehicle_id for f in fills})
        result = StatisticsService.summarize(fills, criteria, months, names)
        logger.debug(
            "Computed statistics over %d fills for user %s",
            result["stats"]["total_fills"],
            owner,
        )
        return result
