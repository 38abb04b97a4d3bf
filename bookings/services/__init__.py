"""
Booking services module.

Services:
- upload_service: Storage key naming and pre-signed upload credentials
"""

from bookings.services.upload_service import build_upload_key, issue_upload_credential

__all__ = ["build_upload_key", "issue_upload_credential"]
