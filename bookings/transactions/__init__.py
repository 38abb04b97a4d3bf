"""
Atomic transaction handlers.

Transaction handlers encapsulate multi-step writes that must execute
atomically (all succeed or all rollback). They coordinate between:
- PostgreSQL database (via SQLAlchemy async sessions)
- S3 object storage (signed URLs, after commit only)

Transaction handlers:
- BookingTransaction: Create a booking and its optional photo row
"""

from bookings.transactions.booking_transaction import BookingTransaction

__all__ = ["BookingTransaction"]
