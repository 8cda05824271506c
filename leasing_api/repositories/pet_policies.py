"""Pet policy lookups."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.pet_policy import PetPolicy


async def get_policy(session: AsyncSession, *, community_id: str, pet_type: str) -> PetPolicy | None:
    """Return the policy for a pet type, matching the type case-insensitively."""

    stmt = (
        select(PetPolicy)
        .where(
            PetPolicy.community_id == community_id,
            func.lower(PetPolicy.pet_type) == pet_type.strip().lower(),
        )
        .order_by(PetPolicy.id.asc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
