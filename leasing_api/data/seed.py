"""Demo community used for development databases and tests."""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..models import Community, PetPolicy, Pricing, TourSlot, Unit
from ..models.base import Base

logger = logging.getLogger(__name__)

COMMUNITY = {
    "id": "sunset-ridge",
    "name": "Sunset Ridge",
    "address": "123 Sunset Blvd, Los Angeles, CA 90210",
    "phone": "(555) 123-4567",
    "email": "leasing@sunsetridge.com",
}

UNITS = [
    {
        "id": "12B",
        "unit_number": "12B",
        "bedrooms": 2,
        "bathrooms": 2.5,
        "sqft": 1200,
        "description": "2 bed 2.5 bath corner unit with city views",
        "available": True,
    },
    {
        "id": "8A",
        "unit_number": "8A",
        "bedrooms": 2,
        "bathrooms": 2.0,
        "sqft": 1100,
        "description": "2 bed 2 bath unit with balcony",
        "available": True,
    },
    {
        "id": "15C",
        "unit_number": "15C",
        "bedrooms": 3,
        "bathrooms": 2.0,
        "sqft": 1400,
        "description": "3 bed 2 bath penthouse unit",
        "available": False,
    },
]

PET_POLICIES = [
    {
        "pet_type": "cat",
        "allowed": True,
        "fee": 50.0,
        "notes": "One-time fee per pet",
        "restrictions": ["Max 2 pets per unit"],
    },
    {
        "pet_type": "dog",
        "allowed": True,
        "fee": 100.0,
        "notes": "One-time fee per pet",
        "restrictions": ["Max 2 pets per unit", "Weight limit 50lbs", "Breed restrictions apply"],
    },
    {
        "pet_type": "bird",
        "allowed": True,
        "fee": 25.0,
        "notes": "One-time fee per pet",
        "restrictions": ["Max 3 birds per unit"],
    },
]

PRICING = [
    {"unit_id": "12B", "rent": 2495.0, "special_offer": "1st month free"},
    {"unit_id": "8A", "rent": 2395.0, "special_offer": "1st month free"},
    {"unit_id": "15C", "rent": 3200.0, "special_offer": None},
]
APPLICATION_FEE = 50.0
ADMIN_FEE = 150.0

# (days ahead, hour of day UTC)
TOUR_SLOT_OFFSETS = [(1, 10), (1, 14), (2, 10), (2, 14), (3, 11)]
TOUR_SLOT_CAPACITY = 3


def tour_slot_times(now: datetime) -> list[datetime]:
    """Slot times relative to ``now``, always in the future."""

    today = now.astimezone(timezone.utc).date()
    return [
        datetime.combine(today + timedelta(days=days), time(hour=hour), tzinfo=timezone.utc)
        for days, hour in TOUR_SLOT_OFFSETS
    ]


async def create_schema(engine: AsyncEngine) -> None:
    """Create the database schema if it does not already exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_demo_data(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    now: datetime | None = None,
) -> None:
    """Insert or refresh the demo community, its units, policies, pricing and tour slots."""

    now = now or datetime.now(timezone.utc)
    community_id = COMMUNITY["id"]

    async with session_factory() as session:
        async with session.begin():
            community = await session.get(Community, community_id)
            if community is None:
                session.add(Community(**COMMUNITY))
            else:
                for key, value in COMMUNITY.items():
                    setattr(community, key, value)
            await session.flush()

            for unit_data in UNITS:
                unit = await session.get(Unit, unit_data["id"])
                if unit is None:
                    session.add(Unit(community_id=community_id, **unit_data))
                else:
                    for key, value in unit_data.items():
                        setattr(unit, key, value)
            await session.flush()

            for policy_data in PET_POLICIES:
                policy = await session.scalar(
                    select(PetPolicy).where(
                        PetPolicy.community_id == community_id,
                        PetPolicy.pet_type == policy_data["pet_type"],
                    )
                )
                if policy is None:
                    session.add(PetPolicy(community_id=community_id, **policy_data))
                else:
                    for key, value in policy_data.items():
                        setattr(policy, key, value)

            effective = now.astimezone(timezone.utc).date()
            for price in PRICING:
                await _upsert_pricing(session, community_id, price, effective)

            for slot_time in tour_slot_times(now):
                existing = await session.scalar(
                    select(TourSlot.id).where(
                        TourSlot.community_id == community_id,
                        TourSlot.slot_time == slot_time,
                    )
                )
                if existing is None:
                    session.add(
                        TourSlot(
                            community_id=community_id,
                            slot_time=slot_time,
                            available=True,
                            max_capacity=TOUR_SLOT_CAPACITY,
                            current_bookings=0,
                        )
                    )

    logger.info("Seeded demo community %s", community_id)


async def _upsert_pricing(session: AsyncSession, community_id: str, price: dict, effective: date) -> None:
    values = {
        "rent": price["rent"],
        "deposit": price["rent"],
        "application_fee": APPLICATION_FEE,
        "admin_fee": ADMIN_FEE,
        "special_offer": price["special_offer"],
    }
    row = await session.scalar(
        select(Pricing).where(Pricing.unit_id == price["unit_id"], Pricing.effective_date == effective)
    )
    if row is None:
        session.add(Pricing(community_id=community_id, unit_id=price["unit_id"], effective_date=effective, **values))
    else:
        for key, value in values.items():
            setattr(row, key, value)
