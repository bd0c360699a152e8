"""Garage package: vehicles, fuel fill-ups and fill dashboards.

This package provides modular functionality for:
- Vehicle management (CRUD operations)
- Fill-up tracking with vehicle odometer and last-fill upkeep
- Filtering/sorting of fill history
- Monthly aggregation and consumption statistics

The package is organized into:
- routes/: API endpoint handlers organized by domain
- services/: Business logic and pure aggregation/selection functions
- serializers.py: Data transformation utilities
"""

from fastapi import APIRouter

from garage.routes import fills, statistics, vehicles

# Create main router that aggregates all garage routes
router = APIRouter()

# Statistics first: /api/fills/statistics must win over /api/fills/{fill_id}
router.include_router(statistics.router, tags=["fill-statistics"])
router.include_router(vehicles.router, tags=["vehicles"])
router.include_router(fills.router, tags=["fills"])

__all__ = ["router"]
