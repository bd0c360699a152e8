"""Family services."""

from families.services.family_data_service import FamilyDataService
from families.services.family_service import FamilyService

__all__ = [
    "FamilyDataService",
    "FamilyService",
]
