"""Community model."""
from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .tour_slot import TourSlot
    from .unit import Unit


class Community(Base):
    """Residential community offering units and tours."""

    __tablename__ = "communities"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String)
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))

    units: Mapped[list["Unit"]] = relationship("Unit", back_populates="community")
    tour_slots: Mapped[list["TourSlot"]] = relationship("TourSlot", back_populates="community")
