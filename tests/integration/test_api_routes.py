"""Integration tests for the HTTP endpoints (routing, status codes, response bodies)."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_booking_transaction, get_database, get_storage
from api.main import app

BOOKING = {
    "id": 41,
    "shift_id": 12,
    "type": "on",
    "lat": 40.4168,
    "lng": -3.7038,
    "photo_id": 7,
    "photo_key": "bookings/1730000000000-k3j2h1x9q0a-photo.jpg",
    "captured_at": "2025-10-29T08:59:41+00:00",
    "photo_url": "https://test-bucket.s3.amazonaws.com/bookings/1730000000000-k3j2h1x9q0a-photo.jpg?X-Amz-Expires=3600",
}


@pytest.fixture
def transaction():
    transaction = MagicMock()
    transaction.execute = AsyncMock(return_value={"success": True, "booking": BOOKING})
    return transaction


@pytest.fixture
def fake_database():
    database = MagicMock()
    database.ping = AsyncMock(return_value=datetime(2025, 10, 29, 9, 0, tzinfo=UTC))
    return database


@pytest.fixture
def client(transaction, storage, fake_database):
    # Startup handlers do not run (no context manager); collaborators are overridden
    app.dependency_overrides[get_booking_transaction] = lambda: transaction
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_database] = lambda: fake_database
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


class TestCreateBooking:
    """POST /bookings"""

    def test_created_booking_returns_201(self, client, transaction):
        payload = {"shift_id": 12, "type": "on", "lat": 40.4168, "lng": -3.7038}

        response = client.post("/bookings", json=payload)

        assert response.status_code == 201
        assert response.json() == {"ok": True, "booking": BOOKING}
        transaction.execute.assert_awaited_once_with(payload)

    def test_validation_error_returns_400_with_field(self, client, transaction):
        transaction.execute.return_value = {
            "success": False,
            "error_code": "invalid_type",
            "error_message": "type must be 'on' or 'off'",
            "details": {"field": "type"},
        }

        response = client.post("/bookings", json={"shift_id": 12, "type": "break"})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "invalid_type", "field": "type"}

    def test_foreign_key_violation_returns_400_with_detail(self, client, transaction):
        transaction.execute.return_value = {
            "success": False,
            "error_code": "foreign_key_violation",
            "error_message": "Referenced record does not exist",
            "details": {
                "detail": 'Key (shift_id)=(999) is not present in table "shifts".',
                "constraint": "fk_bookings_shift_id",
            },
        }

        response = client.post("/bookings", json={"shift_id": 999, "type": "on"})

        assert response.status_code == 400
        assert response.json() == {
            "ok": False,
            "error": "foreign_key_violation",
            "detail": 'Key (shift_id)=(999) is not present in table "shifts".',
        }

    def test_server_error_hides_details(self, client, transaction):
        transaction.execute.return_value = {
            "success": False,
            "error_code": "server_error",
            "error_message": "Unexpected error while creating the booking",
            "details": {},
        }

        response = client.post("/bookings", json={"shift_id": 12, "type": "on"})

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "server_error"}

    def test_unhandled_exception_returns_500(self, client, transaction):
        transaction.execute.side_effect = RuntimeError("pool exhausted")

        response = client.post("/bookings", json={"shift_id": 12, "type": "on"})

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "server_error"}

    def test_malformed_json_returns_invalid_body(self, client, transaction):
        response = client.post(
            "/bookings",
            content=b'{"shift_id": 12, "type": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "invalid_body"}
        transaction.execute.assert_not_awaited()

    def test_non_object_body_returns_invalid_body(self, client, transaction):
        response = client.post("/bookings", json=[1, 2, 3])

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_body"

    def test_empty_body_reaches_validation(self, client, transaction):
        transaction.execute.return_value = {
            "success": False,
            "error_code": "missing_required_field",
            "error_message": "shift_id and type are required",
            "details": {"field": "shift_id"},
        }

        response = client.post("/bookings")

        assert response.status_code == 400
        assert response.json()["error"] == "missing_required_field"
        transaction.execute.assert_awaited_once_with(None)


class TestPresignPhoto:
    """POST /photos/presign"""

    def test_presign_returns_key_and_post(self, client, storage):
        response = client.post(
            "/photos/presign", json={"filename": "selfie.png", "filetype": "image/png"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["key"].startswith("bookings/")
        assert data["key"].endswith("-selfie.png")
        assert data["presigned"]["url"] == "https://test-bucket.s3.amazonaws.com/"
        assert data["presigned"]["fields"]["key"] == data["key"]

        call = storage.upload_calls[0]
        assert call["key"] == data["key"]
        assert call["max_bytes"] == 5_000_000
        assert call["expires_in"] == 60

    def test_non_string_filename_is_not_rejected(self, client, storage):
        response = client.post("/photos/presign", json={"filename": 123, "filetype": ["image/png"]})

        assert response.status_code == 200
        assert response.json()["key"].endswith("-123")
        assert storage.upload_calls[0]["key"] == response.json()["key"]

    def test_presign_without_body_uses_default_filename(self, client):
        response = client.post("/photos/presign")

        assert response.status_code == 200
        assert response.json()["key"].endswith("-photo.jpg")

    def test_presign_failure_returns_500(self, client, storage):
        storage.fail_uploads = True

        response = client.post("/photos/presign", json={"filename": "a.jpg"})

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "presign_failed"}


class TestHealth:
    """GET /health"""

    def test_health_returns_database_time(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "time": "2025-10-29T09:00:00+00:00"}

    def test_unreachable_database_returns_500(self, client, fake_database):
        fake_database.ping.side_effect = OSError("connection refused")

        response = client.get("/health")

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "database_unreachable"}
