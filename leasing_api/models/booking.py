"""Booking model."""
from __future__ import annotations

from datetime import datetime, timezone
import enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .tour_slot import TourSlot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(Base):
    """Tour reservation held against one tour slot."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    community_id: Mapped[str] = mapped_column(ForeignKey("communities.id"), nullable=False, index=True)
    tour_slot_id: Mapped[int] = mapped_column(ForeignKey("tour_slots.id"), nullable=False)
    lead_name: Mapped[str] = mapped_column(String(255), nullable=False)
    lead_email: Mapped[str] = mapped_column(String(255), nullable=False)
    lead_phone: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda members: [m.value for m in members]),
        default=BookingStatus.CONFIRMED,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    tour_slot: Mapped["TourSlot"] = relationship("TourSlot", back_populates="bookings")
