"""
MongoDB connection management.

``DatabaseManager`` is a process-wide singleton owning the motor client. The
client is created lazily on first use and recreated when the running event
loop changes (test runners and reloaders start new loops). ``init_beanie``
binds every document model to the database.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from dataclasses import dataclass
from datetime import UTC
from typing import Any, Final, Self

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

DEFAULT_MONGO_URI: Final[str] = "mongodb://localhost:27017"
DEFAULT_DATABASE_NAME: Final[str] = "fuelbook"


@dataclass(frozen=True)
class MongoSettings:
    """Connection settings read from ``MONGODB_*`` environment variables."""

    uri: str = DEFAULT_MONGO_URI
    database: str = DEFAULT_DATABASE_NAME
    max_pool_size: int = 50
    connect_timeout_ms: int = 5000
    server_selection_timeout_ms: int = 10000
    socket_timeout_ms: int = 30000

    @classmethod
    def from_env(cls) -> MongoSettings:
        return cls(
            uri=os.getenv("MONGODB_URI", "").strip() or DEFAULT_MONGO_URI,
            database=os.getenv("MONGODB_DATABASE", "").strip()
            or DEFAULT_DATABASE_NAME,
            max_pool_size=int(os.getenv("MONGODB_MAX_POOL_SIZE", "50")),
            connect_timeout_ms=int(os.getenv("MONGODB_CONNECTION_TIMEOUT_MS", "5000")),
            server_selection_timeout_ms=int(
                os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "10000")
            ),
            socket_timeout_ms=int(os.getenv("MONGODB_SOCKET_TIMEOUT_MS", "30000")),
        )

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``AsyncIOMotorClient``."""
        kwargs: dict[str, Any] = {
            "tz_aware": True,
            "tzinfo": UTC,
            "maxPoolSize": self.max_pool_size,
            "connectTimeoutMS": self.connect_timeout_ms,
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "socketTimeoutMS": self.socket_timeout_ms,
            "retryWrites": True,
            "appname": "FuelBook",
        }
        # Atlas (SRV) clusters require TLS
        if self.uri.startswith("mongodb+srv://"):
            kwargs["tls"] = True
            kwargs["tlsCAFile"] = certifi.where()
        return kwargs


class DatabaseManager:
    """Singleton owner of the MongoDB client and database handle."""

    _instance: DatabaseManager | None = None
    _lock = threading.Lock()

    def __new__(cls) -> Self:
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._configured = False
                cls._instance = instance
        return cls._instance

    def __init__(self) -> None:
        if self._configured:
            return
        self.settings = MongoSettings.from_env()
        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._beanie_ready = False
        self._configured = True

    @staticmethod
    def _running_loop() -> asyncio.AbstractEventLoop | None:
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _connect(self) -> None:
        try:
            self._client = AsyncIOMotorClient(
                self.settings.uri, **self.settings.client_kwargs()
            )
        except Exception:
            logger.exception("Could not create the MongoDB client")
            raise
        self._db = self._client[self.settings.database]
        self._loop = self._running_loop()
        logger.info("Connected MongoDB client to database %s", self.settings.database)

    def _disconnect(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            except Exception as e:
                logger.warning("Error closing MongoDB client: %s", e)
        self._client = None
        self._db = None
        self._loop = None
        self._beanie_ready = False

    def _loop_changed(self) -> bool:
        if self._loop is None:
            return False
        current = self._running_loop()
        return self._loop.is_closed() or (
            current is not None and current is not self._loop
        )

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """The database handle, connecting (or reconnecting) as needed."""
        if self._loop_changed():
            logger.info("Event loop changed, reconnecting MongoDB client")
            self._disconnect()
        if self._db is None:
            self._connect()
        return self._db

    async def init_beanie(self) -> None:
        """Bind all document models; Beanie creates their declared indexes."""
        from beanie import init_beanie

        from db.models import ALL_DOCUMENT_MODELS

        database = self.db
        if self._beanie_ready:
            return
        await init_beanie(database=database, document_models=ALL_DOCUMENT_MODELS)
        self._beanie_ready = True
        logger.info("Beanie initialized with %d models", len(ALL_DOCUMENT_MODELS))

    async def cleanup_connections(self) -> None:
        """Close the client; the next ``db`` access reconnects."""
        if self._client is not None:
            logger.info("Closing MongoDB client")
        self._disconnect()


db_manager = DatabaseManager()
