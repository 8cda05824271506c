"""Read-only domain queries used as oracle tools."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..repositories import pet_policies as pet_policies_repo
from ..repositories import pricing as pricing_repo
from ..repositories import tour_slots as tour_slots_repo
from ..repositories import units as units_repo
from ..schemas import tools as schemas

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], datetime]

DEFAULT_SLOT_LIMIT = 5


class StorageUnavailableError(RuntimeError):
    """Raised when the backing store fails or does not answer in time."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Ensure the datetime is timezone-aware in UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with a ``Z`` suffix."""

    return ensure_utc(value).isoformat().replace("+00:00", "Z")


async def run_storage(
    session_factory: async_sessionmaker[AsyncSession],
    operation: str,
    work: Callable[[AsyncSession], Awaitable[T]],
    *,
    timeout: float,
) -> T:
    """Run ``work`` in a fresh session, mapping store faults to StorageUnavailableError."""

    async def _with_session() -> T:
        async with session_factory() as session:
            return await work(session)

    try:
        return await asyncio.wait_for(_with_session(), timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Storage operation %s timed out after %.1fs", operation, timeout)
        raise StorageUnavailableError(f"{operation} timed out") from exc
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Storage operation %s failed: %s", operation, exc)
        raise StorageUnavailableError(f"{operation} failed") from exc


class DomainQueryService:
    """Availability, pet policy, pricing and tour slot lookups."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout_seconds: float = 5.0,
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout_seconds
        self._clock = clock

    async def check_availability(
        self, community_id: str, bedrooms: int | None = None
    ) -> list[schemas.UnitAvailability]:
        """Return available units ordered by unit number."""

        async def work(session: AsyncSession) -> list[schemas.UnitAvailability]:
            units = await units_repo.list_available_units(
                session, community_id=community_id, bedrooms=bedrooms
            )
            return [
                schemas.UnitAvailability(
                    unit_id=unit.id,
                    unit_number=unit.unit_number,
                    description=unit.description,
                    bedrooms=unit.bedrooms,
                    bathrooms=float(unit.bathrooms),
                    sqft=unit.sqft,
                    available=bool(unit.available),
                )
                for unit in units
            ]

        return await run_storage(self._session_factory, "check_availability", work, timeout=self._timeout)

    async def check_pet_policy(self, community_id: str, pet_type: str) -> schemas.PetPolicyResult | None:
        """Return the pet policy, or ``None`` when the community has no rule for that pet type."""

        async def work(session: AsyncSession) -> schemas.PetPolicyResult | None:
            policy = await pet_policies_repo.get_policy(session, community_id=community_id, pet_type=pet_type)
            if policy is None:
                return None
            return schemas.PetPolicyResult(
                pet_type=policy.pet_type,
                allowed=bool(policy.allowed),
                fee=float(policy.fee or 0),
                notes=policy.notes or None,
                restrictions=[str(item) for item in policy.restrictions or []],
            )

        return await run_storage(self._session_factory, "check_pet_policy", work, timeout=self._timeout)

    async def get_pricing(
        self,
        community_id: str,
        unit_id: str,
        move_in_date: str | None = None,
    ) -> schemas.PricingResult | None:
        """Return the latest pricing for a unit.

        ``move_in_date`` is part of the tool contract but pricing is not
        date-dependent yet, so the newest effective row is always used.
        """

        async def work(session: AsyncSession) -> schemas.PricingResult | None:
            row = await pricing_repo.get_current_pricing(session, community_id=community_id, unit_id=unit_id)
            if row is None:
                return None
            return schemas.PricingResult(
                unit_id=row.unit_id,
                rent=float(row.rent),
                deposit=float(row.deposit),
                fees=schemas.PricingFees(
                    application=float(row.application_fee or 0),
                    admin=float(row.admin_fee or 0),
                ),
                special=row.special_offer or None,
                effective_date=row.effective_date,
            )

        return await run_storage(self._session_factory, "get_pricing", work, timeout=self._timeout)

    async def get_available_tour_slots(self, community_id: str, limit: int = DEFAULT_SLOT_LIMIT) -> list[datetime]:
        """Return offerable tour times, earliest first."""

        now = self._clock()

        async def work(session: AsyncSession) -> list[datetime]:
            times = await tour_slots_repo.list_open_slot_times(
                session, community_id=community_id, now=now, limit=limit
            )
            return [ensure_utc(value) for value in times]

        return await run_storage(self._session_factory, "get_available_tour_slots", work, timeout=self._timeout)
