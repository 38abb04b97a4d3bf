"""
Startup configuration validation module.

This module provides startup-time validation for critical configuration
to catch misconfigurations early (fail-fast) rather than at runtime when
an employee tries to check in.

Usage:
    from shared.startup_validator import validate_startup_config, StartupValidationError

    try:
        await validate_startup_config(database=database)
    except StartupValidationError as e:
        logger.critical(f"Startup blocked: {e}")
        raise
"""

import logging
from typing import TYPE_CHECKING

from shared.config import Settings, get_settings

if TYPE_CHECKING:
    from database.connection import Database

logger = logging.getLogger(__name__)

# SQLAlchemy async drivers the engine can be built with
ASYNC_DRIVERS = ("+asyncpg", "+aiosqlite")


class StartupValidationError(Exception):
    """Raised when critical startup validation fails."""

    pass


async def validate_startup_config(
    settings: Settings | None = None,
    database: "Database | None" = None,
) -> dict[str, bool]:
    """
    Validate all critical configuration at startup.

    Performs tiered validation:
    - TIER 1 (CRITICAL): Block startup if any fail
    - TIER 2 (IMPORTANT): Warn but allow startup

    Args:
        settings: Settings to validate (defaults to get_settings())
        database: When given, connectivity is checked as a CRITICAL item

    Returns:
        dict of {check_name: passed} for all validations

    Raises:
        StartupValidationError: If any CRITICAL check fails
    """
    settings = settings or get_settings()
    results: dict[str, bool] = {}
    critical_failures: list[str] = []

    # =========================================================================
    # TIER 1: CRITICAL (block startup if any fail)
    # =========================================================================

    # 1. Bucket configured
    if not settings.S3_BUCKET.strip():
        critical_failures.append("S3_BUCKET is empty - set the bucket holding booking photos")
        results["s3_bucket"] = False
    else:
        results["s3_bucket"] = True
        logger.info(f"  [OK] S3 bucket: {settings.S3_BUCKET}")

    # 2. Async database driver
    if not any(driver in settings.DATABASE_URL for driver in ASYNC_DRIVERS):
        critical_failures.append(
            "DATABASE_URL must use an async driver (postgresql+asyncpg://...)"
        )
        results["database_driver"] = False
    else:
        results["database_driver"] = True
        logger.info("  [OK] DATABASE_URL uses an async driver")

    # 3. Static AWS credentials must come in pairs
    has_key_id = bool(settings.AWS_ACCESS_KEY_ID)
    has_secret = bool(settings.AWS_SECRET_ACCESS_KEY)
    if has_key_id != has_secret:
        critical_failures.append(
            "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
        )
        results["aws_credentials"] = False
    else:
        results["aws_credentials"] = True

    # 4. Database reachable
    if database is not None:
        try:
            await database.ping()
            results["database_connection"] = True
            logger.info("  [OK] Database reachable")
        except Exception as e:
            critical_failures.append(f"Database unreachable: {e}")
            results["database_connection"] = False

    # =========================================================================
    # TIER 2: IMPORTANT (warn but allow startup)
    # =========================================================================

    if not has_key_id and not has_secret:
        logger.warning(
            "  [WARN] No static AWS credentials - boto3 default credential chain will be used"
        )

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
    if "*" in origins:
        logger.warning("  [WARN] CORS_ORIGINS allows any origin")
        results["cors_restricted"] = False
    else:
        results["cors_restricted"] = True

    if critical_failures:
        message = "; ".join(critical_failures)
        logger.critical(f"Startup validation failed: {message}")
        raise StartupValidationError(message)

    logger.info("Startup configuration validation passed")
    return results
