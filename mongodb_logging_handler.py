"""
Logging handler that mirrors records into the ``server_logs`` collection.

Records become ``ServerLog`` documents; retention (30 day TTL) and indexes
are declared on the model. Inserts are scheduled on the running event loop
so ``emit`` never blocks a request.
"""

import asyncio
import contextlib
import logging
from typing import Any

from date_utils import get_current_utc_time
from db.models import ServerLog


class MongoDBHandler(logging.Handler):
    """Write log records to MongoDB through Beanie."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._pending: set[asyncio.Task] = set()

    def emit(self, record: logging.LogRecord) -> None:
        # Records emitted outside an event loop (startup scripts, threads)
        # only reach the console handlers.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        try:
            task = loop.create_task(self._insert(self.to_document(record)))
        except Exception:
            self.handleError(record)
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _insert(self, fields: dict[str, Any]) -> None:
        # Never log from here: the record would come straight back.
        with contextlib.suppress(Exception):
            await ServerLog(**fields).insert()

    def to_document(self, record: logging.LogRecord) -> dict[str, Any]:
        """Fields of the ``ServerLog`` document for ``record``."""
        fields: dict[str, Any] = {
            "timestamp": get_current_utc_time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            fields["exception"] = self.format(record)
        return fields
