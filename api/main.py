"""
FastAPI API Service Entry Point
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import get_database
from api.routes import bookings, photos
from bookings.transactions.booking_transaction import BookingTransaction
from database.connection import Database
from shared.config import get_settings
from shared.logging_config import configure_logging
from shared.startup_validator import StartupValidationError, validate_startup_config
from shared.storage_client import ObjectStorage

# Configure structured JSON logging on startup
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Shift Bookings API",
    version="1.0.0",
)

# Load settings for CORS configuration
settings = get_settings()
origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(photos.router)
app.include_router(bookings.router)


# =========================================================================
# LIFECYCLE - shared collaborators
# =========================================================================
@app.on_event("startup")
async def startup_collaborators():
    """
    Build the database pool and S3 client, then validate configuration.

    Raises:
        StartupValidationError: If critical configuration is invalid
    """
    settings = get_settings()

    database = Database.from_settings(settings)
    storage = ObjectStorage.from_settings(settings)

    app.state.database = database
    app.state.storage = storage
    app.state.booking_transaction = BookingTransaction(
        database=database,
        storage=storage,
        read_url_ttl=settings.READ_URL_TTL_SECONDS,
    )

    logger.info("Running API startup configuration validation...")
    try:
        await validate_startup_config(settings, database=database)
    except StartupValidationError as e:
        logger.critical(f"API startup blocked due to configuration errors: {e}")
        await database.dispose()
        raise


@app.on_event("shutdown")
async def shutdown_collaborators():
    database = getattr(app.state, "database", None)
    if database is not None:
        await database.dispose()


# =========================================================================
# ERROR HANDLERS
# =========================================================================
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed or non-object JSON bodies."""
    logger.info(
        f"Rejected malformed body: {exc.errors()}",
        extra={"request_path": request.url.path},
    )
    return JSONResponse(
        status_code=400,
        content={"ok": False, "error": "invalid_body"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error: {exc}",
        extra={"request_path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "server_error"},
    )


@app.get("/health")
async def health_check(database: Database = Depends(get_database)) -> JSONResponse:
    """
    Health check endpoint for container health checks and monitoring.

    Runs ``SELECT now()`` through the connection pool.

    Returns:
        200 OK with the database time
        500 if the database is unreachable
    """
    try:
        now = await database.ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "database_unreachable"},
        )

    return JSONResponse(
        status_code=200,
        content={"ok": True, "time": now.isoformat()},
    )
