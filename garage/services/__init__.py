"""Garage services."""

from garage.services.fill_service import FillService
from garage.services.statistics_service import StatisticsService
from garage.services.vehicle_service import VehicleService

__all__ = [
    "FillService",
    "StatisticsService",
    "VehicleService",
]
