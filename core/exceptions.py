"""
Domain errors raised by the service layer.

Each error class carries the HTTP status it is reported with and the level
it is logged at; ``core.api.api_route`` turns them into ``HTTPException``.
The ``*Exception`` names are aliases used throughout the services.
"""

import logging

from fastapi import status


class FuelBookError(Exception):
    """Base exception for all application-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    log_level: int = logging.ERROR

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(FuelBookError):
    """Input is well-formed JSON but not acceptable (bad id, sole owner...)."""

    status_code = status.HTTP_400_BAD_REQUEST
    log_level = logging.WARNING


class AuthenticationError(FuelBookError):
    """The caller cannot be identified."""

    status_code = status.HTTP_401_UNAUTHORIZED
    log_level = logging.WARNING


class AuthorizationError(FuelBookError):
    """The caller may not act on the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    log_level = logging.WARNING


class ResourceNotFoundError(FuelBookError):
    status_code = status.HTTP_404_NOT_FOUND
    log_level = logging.INFO


class DuplicateResourceError(FuelBookError):
    """The resource or membership already exists, or was already used."""

    status_code = status.HTTP_409_CONFLICT
    log_level = logging.WARNING


class ExpiredResourceError(FuelBookError):
    """A time-limited resource (invite code) is past its expiry."""

    status_code = status.HTTP_410_GONE
    log_level = logging.INFO


FuelBookException = FuelBookError
ValidationException = ValidationError
AuthenticationException = AuthenticationError
AuthorizationException = AuthorizationError
ResourceNotFoundException = ResourceNotFoundError
DuplicateResourceException = DuplicateResourceError
ExpiredResourceException = ExpiredResourceError
