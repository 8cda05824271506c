"""Pet policy model."""
from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


class PetPolicy(Base):
    """Pet rules for one pet type within a community."""

    __tablename__ = "pet_policies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[str] = mapped_column(ForeignKey("communities.id"), nullable=False, index=True)
    pet_type: Mapped[str] = mapped_column(String(50), nullable=False)
    allowed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    fee: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    restrictions: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
