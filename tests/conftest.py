"""
Test configuration and fixtures.

This module sets up test environment and provides shared fixtures for all tests.
"""

import os

# Must be set BEFORE any imports of shared.config (settings are cached)
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_bookings.db"
os.environ["S3_BUCKET"] = "test-bucket"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["CORS_ORIGINS"] = "http://localhost:3000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from sqlalchemy import func, select

from bookings.transactions.booking_transaction import BookingTransaction
from database.connection import Database, create_engine
from database.models import Base, Shift
from shared.storage_client import StorageError

# Shift rows present in every test database
KNOWN_SHIFT_IDS = (1, 2, 3, 4, 5)


class FakeObjectStorage:
    """In-memory stand-in for ObjectStorage that records every signing call."""

    def __init__(self):
        self.bucket = "test-bucket"
        self.upload_calls: list[dict] = []
        self.read_calls: list[tuple[str, int]] = []
        self.fail_uploads = False
        self.fail_reads = False

    async def generate_upload_credential(self, key: str, max_bytes: int, expires_in: int) -> dict:
        self.upload_calls.append({"key": key, "max_bytes": max_bytes, "expires_in": expires_in})
        if self.fail_uploads:
            raise StorageError("S3 presigned POST failed")
        return {
            "url": "https://test-bucket.s3.amazonaws.com/",
            "fields": {"key": key, "policy": "cG9saWN5", "x-amz-signature": "abc123"},
        }

    async def generate_read_url(self, key: str | None, expires_in: int = 3600) -> str | None:
        if not key:
            return None
        self.read_calls.append((key, expires_in))
        if self.fail_reads:
            raise StorageError("S3 presigned GET failed")
        return f"https://test-bucket.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in}"


@pytest.fixture
async def database(tmp_path):
    """
    File-backed SQLite database with the full schema and KNOWN_SHIFT_IDS seeded.

    Foreign keys are enforced (see database.connection.create_engine).
    """
    db = Database(create_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}"))

    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with db.transaction() as session:
        session.add_all(Shift(id=shift_id) for shift_id in KNOWN_SHIFT_IDS)

    yield db

    await db.dispose()


@pytest.fixture
def storage():
    return FakeObjectStorage()


@pytest.fixture
def booking_transaction(database, storage):
    return BookingTransaction(database=database, storage=storage, read_url_ttl=3600)


@pytest.fixture
def count_rows(database):
    """Return an async helper counting the rows of a model's table."""

    async def _count(model) -> int:
        async with database.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return result.scalar_one()

    return _count
