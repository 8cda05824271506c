"""Tour booking and cancellation transactions.

Capacity on a tour slot is the only contended resource in the service. A
booking holds two guards while it reads and bumps the counter:

* an in-process ``asyncio.Lock`` per (community, slot time), so coroutines in
  this worker never interleave on the same slot;
* a ``SELECT ... FOR UPDATE`` row lock plus a guarded ``UPDATE`` on the
  counter, so other workers sharing the database queue behind the row.

Both are released when the transaction commits or rolls back.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.booking import BookingStatus
from ..repositories import bookings as bookings_repo
from ..repositories import tour_slots as tour_slots_repo
from ..schemas import bookings as schemas
from .domain import Clock, ensure_utc, run_storage, utcnow

logger = logging.getLogger(__name__)

SLOT_NOT_AVAILABLE = "slot not available"


@dataclass(slots=True)
class BookingResult:
    success: bool
    booking_id: str | None = None
    reason: str | None = None

    @classmethod
    def unavailable(cls) -> "BookingResult":
        return cls(success=False, reason=SLOT_NOT_AVAILABLE)


class KeyedLocks:
    """Lazily created asyncio locks, dropped once nobody holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class BookingManager:
    """Capacity-safe tour reservations."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout_seconds: float = 5.0,
        clock: Clock = utcnow,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout_seconds
        self._clock = clock
        self._locks = locks or KeyedLocks()

    async def book_tour_slot(
        self,
        community_id: str,
        slot_time: datetime,
        lead_name: str,
        lead_email: str,
        lead_phone: str | None = None,
    ) -> BookingResult:
        """Reserve one seat on the slot, or report that it is not available."""

        slot_time = ensure_utc(slot_time)

        async def work(session: AsyncSession) -> BookingResult:
            now = self._clock()
            async with session.begin():
                slot = await tour_slots_repo.lock_bookable_slot(
                    session, community_id=community_id, slot_time=slot_time, now=now
                )
                if slot is None:
                    return BookingResult.unavailable()

                if not await tour_slots_repo.claim_seat(session, slot_id=slot.id):
                    return BookingResult.unavailable()

                booking_id = await bookings_repo.create_booking(
                    session,
                    community_id=community_id,
                    tour_slot_id=slot.id,
                    lead_name=lead_name,
                    lead_email=lead_email,
                    lead_phone=lead_phone,
                    now=now,
                )
            return BookingResult(success=True, booking_id=booking_id)

        async with self._locks.hold(("slot", community_id, slot_time)):
            result = await run_storage(self._session_factory, "book_tour_slot", work, timeout=self._timeout)

        if result.success:
            logger.info("Booked tour %s for %s at %s", result.booking_id, community_id, slot_time.isoformat())
        else:
            logger.info("Tour slot %s at %s not available", community_id, slot_time.isoformat())
        return result

    async def cancel_booking(self, booking_id: str) -> bool:
        """Cancel a booking and free its seat. Returns False if missing or already cancelled."""

        async def work(session: AsyncSession) -> bool:
            now = self._clock()
            async with session.begin():
                booking = await bookings_repo.lock_booking(session, booking_id)
                if booking is None or booking.status is BookingStatus.CANCELLED:
                    return False

                if not await bookings_repo.mark_cancelled(session, booking_id=booking_id, now=now):
                    return False
                await tour_slots_repo.release_seat(session, slot_id=booking.tour_slot_id)
            return True

        async with self._locks.hold(("booking", booking_id)):
            cancelled = await run_storage(self._session_factory, "cancel_booking", work, timeout=self._timeout)

        if cancelled:
            logger.info("Cancelled booking %s", booking_id)
        return cancelled

    async def get_booking(self, booking_id: str) -> schemas.BookingDetail | None:
        async def work(session: AsyncSession) -> schemas.BookingDetail | None:
            row = await bookings_repo.get_booking_detail(session, booking_id)
            return _to_detail(*row) if row else None

        return await run_storage(self._session_factory, "get_booking", work, timeout=self._timeout)

    async def list_bookings(
        self,
        community_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[schemas.BookingDetail]:
        """Return bookings newest first."""

        async def work(session: AsyncSession) -> list[schemas.BookingDetail]:
            rows = await bookings_repo.list_booking_details(
                session, community_id=community_id, limit=limit, offset=offset
            )
            return [_to_detail(*row) for row in rows]

        return await run_storage(self._session_factory, "list_bookings", work, timeout=self._timeout)


def _to_detail(booking, community, slot) -> schemas.BookingDetail:
    return schemas.BookingDetail(
        booking_id=booking.booking_id,
        community_id=community.id,
        community_name=community.name,
        lead_name=booking.lead_name,
        lead_email=booking.lead_email,
        lead_phone=booking.lead_phone,
        status=booking.status,
        notes=booking.notes,
        slot_time=ensure_utc(slot.slot_time),
        max_capacity=slot.max_capacity,
        current_bookings=slot.current_bookings,
        created_at=ensure_utc(booking.created_at),
        updated_at=ensure_utc(booking.updated_at),
    )
