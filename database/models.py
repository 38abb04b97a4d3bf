"""
SQLAlchemy ORM models for the bookings database.

This module defines the tables:
- shifts: Mirror of the externally owned shift table (foreign key target only)
- photos: Object-storage uploads attached to bookings
- bookings: Check-in/check-out events for a shift

All models use:
- Integer primary keys assigned by the store
- TIMESTAMP WITH TIME ZONE for datetime fields
- Named constraints so store errors can be classified
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy import (
    Enum as SQLEnum,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# ============================================================================
# Base Class
# ============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ============================================================================
# Enums
# ============================================================================


class BookingType(str, PyEnum):
    """Booking kind: start or end of a shift."""

    ON = "on"    # check-in
    OFF = "off"  # check-out

    def __str__(self):
        return self.value


# ============================================================================
# Models
# ============================================================================


class Shift(Base):
    """
    Shift model - owned by the scheduling system.

    Only the primary key is mapped; bookings reference it and the store
    enforces the foreign key.
    """

    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    def __repr__(self) -> str:
        return f"<Shift(id={self.id})>"


class Photo(Base):
    """Photo model - pointer to an object uploaded with a pre-signed POST."""

    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    s3_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    booking: Mapped[Optional["Booking"]] = relationship(
        "Booking", back_populates="photo", uselist=False
    )

    __table_args__ = (UniqueConstraint("s3_key", name="uq_photos_s3_key"),)

    def __repr__(self) -> str:
        return f"<Photo(id={self.id}, s3_key='{self.s3_key}')>"


class Booking(Base):
    """
    Booking model - a single check-in or check-out for a shift.

    Created once per request together with its optional photo; never updated.
    """

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    shift_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("shifts.id", name="fk_bookings_shift_id"),
        nullable=False,
        index=True,
    )
    photo_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("photos.id", name="fk_bookings_photo_id"),
        nullable=True,
    )

    # Note: values_callable stores the enum .value ("on") instead of .name ("ON")
    type: Mapped[BookingType] = mapped_column(
        SQLEnum(
            BookingType,
            name="booking_type",
            native_enum=False,
            length=3,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )

    # Location (optional)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)

    captured_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    photo: Mapped[Optional["Photo"]] = relationship("Photo", back_populates="booking")

    __table_args__ = (
        CheckConstraint("type IN ('on', 'off')", name="check_booking_type"),
        UniqueConstraint("photo_id", name="uq_bookings_photo_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, shift_id={self.shift_id}, type='{self.type}')>"
