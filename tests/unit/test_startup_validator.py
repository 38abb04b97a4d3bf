"""
Unit tests for startup_validator.py - Fail-fast configuration checks.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from shared.config import Settings
from shared.startup_validator import StartupValidationError, validate_startup_config


def _settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "postgresql+asyncpg://u:p@localhost:5432/db",
        "S3_BUCKET": "test-bucket",
        "AWS_ACCESS_KEY_ID": None,
        "AWS_SECRET_ACCESS_KEY": None,
        "CORS_ORIGINS": "http://localhost:3000",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio
async def test_valid_configuration_passes():
    results = await validate_startup_config(_settings())

    assert results["s3_bucket"] is True
    assert results["database_driver"] is True
    assert results["aws_credentials"] is True
    assert results["cors_restricted"] is True


@pytest.mark.asyncio
async def test_empty_bucket_blocks_startup():
    with pytest.raises(StartupValidationError, match="S3_BUCKET"):
        await validate_startup_config(_settings(S3_BUCKET=""))


@pytest.mark.asyncio
async def test_sync_driver_blocks_startup():
    with pytest.raises(StartupValidationError, match="async driver"):
        await validate_startup_config(_settings(DATABASE_URL="postgresql://u:p@localhost/db"))


@pytest.mark.asyncio
async def test_half_configured_aws_credentials_block_startup():
    with pytest.raises(StartupValidationError, match="AWS_ACCESS_KEY_ID"):
        await validate_startup_config(_settings(AWS_ACCESS_KEY_ID="AKIATEST"))


@pytest.mark.asyncio
async def test_wildcard_cors_only_warns():
    results = await validate_startup_config(_settings(CORS_ORIGINS="*"))
    assert results["cors_restricted"] is False


@pytest.mark.asyncio
async def test_unreachable_database_blocks_startup():
    database = MagicMock()
    database.ping = AsyncMock(side_effect=OSError("connection refused"))

    with pytest.raises(StartupValidationError, match="Database unreachable"):
        await validate_startup_config(_settings(), database=database)


@pytest.mark.asyncio
async def test_reachable_database_recorded():
    database = MagicMock()
    database.ping = AsyncMock()

    results = await validate_startup_config(_settings(), database=database)

    assert results["database_connection"] is True
    database.ping.assert_awaited_once()
