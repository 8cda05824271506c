"""Shared fixtures: a seeded SQLite database and a frozen clock."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from leasing_api.data.seed import create_schema, seed_demo_data, tour_slot_times
from leasing_api.db.session import build_session_factory

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
COMMUNITY_ID = "sunset-ridge"


def frozen_clock() -> datetime:
    return NOW


@pytest.fixture
def slot_times() -> list[datetime]:
    return tour_slot_times(NOW)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'leasing.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = build_session_factory(engine)
    await seed_demo_data(factory, now=NOW)
    return factory
