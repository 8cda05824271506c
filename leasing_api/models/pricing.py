"""Pricing model."""
from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, Numeric, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Pricing(Base):
    """Rent and fee schedule for a unit, effective from a given date."""

    __tablename__ = "pricing"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[str] = mapped_column(ForeignKey("communities.id"), nullable=False)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False, index=True)
    rent: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    deposit: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    application_fee: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    admin_fee: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    special_offer: Mapped[str | None] = mapped_column(Text)
    effective_date: Mapped[date] = mapped_column(Date, server_default=func.current_date(), nullable=False)
