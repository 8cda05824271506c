"""Pricing lookups."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.pricing import Pricing


async def get_current_pricing(session: AsyncSession, *, community_id: str, unit_id: str) -> Pricing | None:
    """Return the pricing row with the latest effective date for the unit."""

    stmt = (
        select(Pricing)
        .where(Pricing.community_id == community_id, Pricing.unit_id == unit_id)
        .order_by(Pricing.effective_date.desc(), Pricing.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
