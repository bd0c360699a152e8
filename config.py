"""Centralized configuration for environment variables.

This module is the single source of truth for configuration used across the
application. Import constants from here rather than calling os.getenv directly
in multiple places.

MongoDB connection settings are read by ``db.manager.DatabaseManager``.
"""

from __future__ import annotations

import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()


# --- Public application URL (used to build invite links) ---
APP_URL: Final[str] = os.getenv("APP_URL", "http://localhost:8080").rstrip("/")

# --- Family invitations ---
INVITE_TOKEN_TTL_DAYS: Final[int] = int(os.getenv("INVITE_TOKEN_TTL_DAYS", "7"))

# --- Identity forwarded by the authenticating gateway ---
USER_ID_HEADER: Final[str] = os.getenv("USER_ID_HEADER", "X-User-Id")

# --- Logging ---
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()

# --- CORS ---
DEFAULT_CORS_ORIGINS: Final[list[str]] = [
    "http://localhost:3000",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8080",
]


def get_cors_origins() -> list[str]:
    """Return allowed CORS origins from CORS_ALLOWED_ORIGINS or dev defaults."""
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)


def build_invite_link(token: str) -> str:
    """Return the shareable join link for a family invite token."""
    return f"{APP_URL}/families/join?code={token}"


__all__ = [
    "APP_URL",
    "DEFAULT_CORS_ORIGINS",
    "INVITE_TOKEN_TTL_DAYS",
    "LOG_LEVEL",
    "USER_ID_HEADER",
    "build_invite_link",
    "get_cors_origins",
]
