"""Error handling decorator shared by all API routes."""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import HTTPException, status

from core.exceptions import FuelBookError


def api_route(logger: logging.Logger):
    """
    Wrap an async endpoint so domain errors become HTTP responses.

    - ``HTTPException`` propagates unchanged.
    - ``FuelBookError`` subclasses are logged at their ``log_level`` and
      reported with their ``status_code`` and message.
    - Anything else is logged with its traceback and reported as 500.

    Usage:
        @router.get("/api/vehicles")
        @api_route(logger)
        async def get_vehicles(user_id: CurrentUser):
            return await VehicleService.get_vehicles(user_id)
    """

    def decorator(
        func: Callable[..., Awaitable[Any]],
    ) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except FuelBookError as e:
                logger.log(
                    e.log_level,
                    "%s in %s: %s",
                    type(e).__name__,
                    func.__name__,
                    e.message,
                    exc_info=e.log_level >= logging.ERROR,
                )
                raise HTTPException(
                    status_code=e.status_code,
                    detail=e.message,
                ) from e
            except Exception as e:
                logger.exception("Unexpected error in %s", func.__name__)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=str(e),
                ) from e

        return wrapper

    return decorator
