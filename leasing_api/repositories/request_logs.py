"""Request log persistence."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.request_log import RequestLog


async def append_entry(
    session: AsyncSession,
    *,
    request_id: str,
    created_at: datetime,
    tool_name: str | None = None,
    tool_args: dict[str, Any] | None = None,
    tool_response: Any = None,
    llm_latency_ms: float | None = None,
    llm_tokens_prompt: int | None = None,
    llm_tokens_completion: int | None = None,
    llm_tokens_total: int | None = None,
    error_message: str | None = None,
) -> None:
    """Insert one log row."""

    session.add(
        RequestLog(
            request_id=request_id,
            created_at=created_at,
            tool_name=tool_name,
            tool_args=tool_args,
            tool_response=tool_response,
            llm_latency_ms=llm_latency_ms,
            llm_tokens_prompt=llm_tokens_prompt,
            llm_tokens_completion=llm_tokens_completion,
            llm_tokens_total=llm_tokens_total,
            error_message=error_message,
        )
    )
    await session.flush()
