"""Append-only request log: one row per tool call and one per request outcome."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..repositories import request_logs as request_logs_repo
from .domain import run_storage, utcnow

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LogEntry:
    request_id: str
    created_at: datetime
    tool_name: str | None = None
    tool_args: dict[str, Any] | None = None
    tool_response: Any = None
    llm_latency_ms: float | None = None
    llm_tokens_prompt: int | None = None
    llm_tokens_completion: int | None = None
    llm_tokens_total: int | None = None
    error_message: str | None = None

    @classmethod
    def now(cls, request_id: str, **values: Any) -> "LogEntry":
        return cls(request_id=request_id, created_at=utcnow(), **values)


class RequestLogger:
    """Writes log entries to the database and to the application log."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout_seconds

    async def record(self, entry: LogEntry) -> None:
        """Persist the entry. Raises StorageUnavailableError if the store rejects it."""

        if entry.tool_name:
            logger.info(
                "Request %s tool %s args=%s error=%s",
                entry.request_id,
                entry.tool_name,
                entry.tool_args,
                entry.error_message,
            )
        elif entry.error_message:
            logger.warning(
                "Request %s failed after %s ms: %s",
                entry.request_id,
                _format_latency(entry.llm_latency_ms),
                entry.error_message,
            )
        else:
            logger.info(
                "Request %s processed in %s ms (tokens=%s)",
                entry.request_id,
                _format_latency(entry.llm_latency_ms),
                entry.llm_tokens_total,
            )

        async def work(session: AsyncSession) -> None:
            async with session.begin():
                await request_logs_repo.append_entry(session, **asdict(entry))

        await run_storage(self._session_factory, "record_request_log", work, timeout=self._timeout)


def _format_latency(value: float | None) -> str:
    return "?" if value is None else f"{value:.0f}"
