"""Unit availability queries."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.unit import Unit


async def list_available_units(
    session: AsyncSession,
    *,
    community_id: str,
    bedrooms: int | None = None,
) -> list[Unit]:
    """Return available units for the community ordered by unit number."""

    stmt = select(Unit).where(Unit.community_id == community_id, Unit.available.is_(True))
    if bedrooms is not None:
        stmt = stmt.where(Unit.bedrooms == bedrooms)
    stmt = stmt.order_by(Unit.unit_number.asc())

    result = await session.execute(stmt)
    return list(result.scalars().all())
