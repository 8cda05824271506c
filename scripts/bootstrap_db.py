"""Create database schema and seed the demo community for development."""
from __future__ import annotations

import asyncio

from leasing_api.core.config import get_settings
from leasing_api.core.logging import configure_logging
from leasing_api.data.seed import create_schema, seed_demo_data
from leasing_api.db.session import build_engine, build_session_factory


async def main() -> None:
	settings = get_settings()
	configure_logging(settings.log_level)

	engine = build_engine(settings)
	try:
		await create_schema(engine)
		await seed_demo_data(build_session_factory(engine))
	finally:
		await engine.dispose()
	print("Database schema ensured and demo data seeded.")


if __name__ == "__main__":
	asyncio.run(main())
