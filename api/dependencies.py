"""
FastAPI dependencies for shared collaborators.

Collaborators are built once in the startup handler (api/main.py) and stored
on ``app.state``; routes receive them through these providers, which tests
replace with ``app.dependency_overrides``.
"""

from fastapi import Request

from bookings.transactions.booking_transaction import BookingTransaction
from database.connection import Database
from shared.storage_client import ObjectStorage


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_booking_transaction(request: Request) -> BookingTransaction:
    return request.app.state.booking_transaction
