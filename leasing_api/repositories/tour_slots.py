"""Tour slot queries and capacity updates."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.tour_slot import TourSlot


async def list_open_slot_times(
    session: AsyncSession,
    *,
    community_id: str,
    now: datetime,
    limit: int,
) -> list[datetime]:
    """Return upcoming slot times that still have capacity, earliest first."""

    stmt = (
        select(TourSlot.slot_time)
        .where(
            TourSlot.community_id == community_id,
            TourSlot.available.is_(True),
            TourSlot.current_bookings < TourSlot.max_capacity,
            TourSlot.slot_time > now,
        )
        .order_by(TourSlot.slot_time.asc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def lock_bookable_slot(
    session: AsyncSession,
    *,
    community_id: str,
    slot_time: datetime,
    now: datetime,
) -> TourSlot | None:
    """Lock and return the slot if it can take another booking.

    Uses ``SELECT ... FOR UPDATE`` so concurrent transactions on the same row
    queue behind this one until it commits or rolls back.
    """

    stmt = (
        select(TourSlot)
        .where(
            TourSlot.community_id == community_id,
            TourSlot.slot_time == slot_time,
            TourSlot.available.is_(True),
            TourSlot.current_bookings < TourSlot.max_capacity,
            TourSlot.slot_time > now,
        )
        .with_for_update()
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def claim_seat(session: AsyncSession, *, slot_id: int) -> bool:
    """Increment the booking counter unless the slot is already full."""

    stmt = (
        update(TourSlot)
        .where(TourSlot.id == slot_id, TourSlot.current_bookings < TourSlot.max_capacity)
        .values(current_bookings=TourSlot.current_bookings + 1)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


async def release_seat(session: AsyncSession, *, slot_id: int) -> bool:
    """Decrement the booking counter, never below zero."""

    stmt = (
        update(TourSlot)
        .where(TourSlot.id == slot_id, TourSlot.current_bookings > 0)
        .values(current_bookings=TourSlot.current_bookings - 1)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1
