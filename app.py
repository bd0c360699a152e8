"""FuelBook API application: wires routers, CORS, logging and the database."""

import logging
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import LOG_LEVEL, get_cors_origins
from db import db_manager, init_database
from families import router as families_router
from garage import router as garage_router
from mongodb_logging_handler import MongoDBHandler

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Bind the ODM, mirror logs to MongoDB, and close the client on exit."""
    try:
        await init_database()
    except Exception:
        logger.critical("Could not initialize the database", exc_info=True)
        raise

    log_handler = MongoDBHandler(level=logging.INFO)
    root_logger = logging.getLogger()
    root_logger.addHandler(log_handler)
    logger.info("FuelBook started; logs mirrored to server_logs")

    try:
        yield
    finally:
        root_logger.removeHandler(log_handler)
        await db_manager.cleanup_connections()
        logger.info("FuelBook stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application with every router and handler."""
    application = FastAPI(title="FuelBook", lifespan=lifespan)

    origins = get_cors_origins()
    if os.getenv("CORS_ALLOWED_ORIGINS"):
        logger.info("CORS origins: %s", origins)
    else:
        logger.warning("CORS_ALLOWED_ORIGINS not set, allowing %s", origins)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    application.include_router(garage_router)
    application.include_router(families_router)

    application.add_exception_handler(404, not_found_handler)
    application.add_exception_handler(500, internal_error_handler)
    return application


async def not_found_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Report unknown routes and missing resources alike."""
    logger.info("404 on %s %s: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Not found", "detail": exc.detail},
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report an unhandled error with an id that can be found in the logs."""
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled error %s on %s %s: %s",
        error_id,
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "error_id": error_id},
    )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        log_level=LOG_LEVEL.lower(),
    )
