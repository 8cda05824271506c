"""Wiring of the long-lived services shared by every request."""
from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..db.session import build_engine, build_session_factory
from ..services.agent import LeasingAgent
from ..services.bookings import BookingManager
from ..services.domain import DomainQueryService
from ..services.oracle import GeminiOracle, ReasoningOracle
from ..services.request_log import RequestLogger
from ..services.tools import ToolBridge
from .config import Settings


@dataclass
class AppServices:
    session_factory: async_sessionmaker[AsyncSession]
    domain: DomainQueryService
    bookings: BookingManager
    agent: LeasingAgent
    engine: AsyncEngine | None = None


def build_services(
    settings: Settings,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    oracle: ReasoningOracle | None = None,
) -> AppServices:
    """Assemble the service graph from settings, reusing any injected pieces."""

    engine: AsyncEngine | None = None
    if session_factory is None:
        engine = build_engine(settings)
        session_factory = build_session_factory(engine)

    timeout = settings.storage_timeout_seconds
    domain = DomainQueryService(session_factory, timeout_seconds=timeout)
    agent = LeasingAgent(
        oracle or GeminiOracle(settings),
        ToolBridge(domain),
        RequestLogger(session_factory, timeout_seconds=timeout),
        oracle_timeout_seconds=settings.oracle_timeout_seconds,
        max_rounds=settings.oracle_max_rounds,
    )
    return AppServices(
        session_factory=session_factory,
        domain=domain,
        bookings=BookingManager(session_factory, timeout_seconds=timeout),
        agent=agent,
        engine=engine,
    )


def get_services(request: Request) -> AppServices:
    """FastAPI dependency returning the services attached at startup."""

    return request.app.state.services


def new_request_id() -> str:
    return str(uuid4())
