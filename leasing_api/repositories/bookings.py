"""Booking persistence helpers."""
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.booking import Booking, BookingStatus
from ..models.community import Community
from ..models.tour_slot import TourSlot


def new_booking_id() -> str:
    return f"booking_{uuid4().hex}"


async def create_booking(
    session: AsyncSession,
    *,
    community_id: str,
    tour_slot_id: int,
    lead_name: str,
    lead_email: str,
    lead_phone: str | None,
    now: datetime,
) -> str:
    """Persist a confirmed booking and return its public identifier."""

    booking = Booking(
        booking_id=new_booking_id(),
        community_id=community_id,
        tour_slot_id=tour_slot_id,
        lead_name=lead_name,
        lead_email=lead_email,
        lead_phone=lead_phone or None,
        status=BookingStatus.CONFIRMED,
        created_at=now,
        updated_at=now,
    )
    session.add(booking)
    await session.flush()
    return booking.booking_id


async def lock_booking(session: AsyncSession, booking_id: str) -> Booking | None:
    """Lock and return the booking row for a status change."""

    stmt = select(Booking).where(Booking.booking_id == booking_id).with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def mark_cancelled(session: AsyncSession, *, booking_id: str, now: datetime) -> bool:
    """Move a booking to cancelled unless it already is."""

    stmt = (
        update(Booking)
        .where(Booking.booking_id == booking_id, Booking.status != BookingStatus.CANCELLED)
        .values(status=BookingStatus.CANCELLED, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


def _detail_query() -> Select[tuple[Booking, Community, TourSlot]]:
    return (
        select(Booking, Community, TourSlot)
        .join(Community, Booking.community_id == Community.id)
        .join(TourSlot, Booking.tour_slot_id == TourSlot.id)
    )


async def get_booking_detail(
    session: AsyncSession, booking_id: str
) -> tuple[Booking, Community, TourSlot] | None:
    """Return a booking with its community and slot."""

    result = await session.execute(_detail_query().where(Booking.booking_id == booking_id))
    row = result.first()
    if row is None:
        return None
    booking, community, slot = row
    return booking, community, slot


async def list_booking_details(
    session: AsyncSession,
    *,
    community_id: str | None,
    limit: int,
    offset: int,
) -> list[tuple[Booking, Community, TourSlot]]:
    """Return bookings newest first, optionally for one community."""

    stmt = _detail_query()
    if community_id:
        stmt = stmt.where(Booking.community_id == community_id)
    stmt = stmt.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit).offset(offset)

    result = await session.execute(stmt)
    return [(booking, community, slot) for booking, community, slot in result.all()]
