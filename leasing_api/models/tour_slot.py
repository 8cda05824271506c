"""Tour slot model."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .booking import Booking
    from .community import Community


class TourSlot(Base):
    """Bookable tour time with a fixed capacity."""

    __tablename__ = "tour_slots"
    __table_args__ = (
        UniqueConstraint("community_id", "slot_time", name="uq_tour_slots_community_time"),
        CheckConstraint(
            "current_bookings >= 0 AND current_bookings <= max_capacity",
            name="ck_tour_slots_capacity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[str] = mapped_column(ForeignKey("communities.id"), nullable=False, index=True)
    slot_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    current_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    community: Mapped["Community"] = relationship("Community", back_populates="tour_slots")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="tour_slot")
