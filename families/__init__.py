"""Families package: sharing vehicles and fills between users.

The package is organized into:
- routes/: family management and shared-data endpoints
- services/: membership, invitation and family dashboard logic
- serializers.py: Data transformation utilities
"""

from fastapi import APIRouter

from families.routes import families, shared

router = APIRouter()

router.include_router(families.router, tags=["families"])
router.include_router(shared.router, tags=["family-data"])

__all__ = ["router"]
