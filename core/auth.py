"""Caller identity for API routes.

Authentication itself happens upstream: the gateway in front of the service
verifies the session and forwards the user id in a request header. Routes
depend on ``get_current_user_id`` to read it.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from config import USER_ID_HEADER


async def get_current_user_id(request: Request) -> str:
    """Return the authenticated user id forwarded by the gateway."""
    user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user_id
