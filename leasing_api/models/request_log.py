"""Request log model."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


class RequestLog(Base):
    """Append-only record of one tool call or one request outcome."""

    __tablename__ = "request_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    request_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    tool_name: Mapped[str | None] = mapped_column(String(100))
    tool_args: Mapped[dict | None] = mapped_column(JSONType)
    tool_response: Mapped[Any] = mapped_column(JSONType)
    llm_latency_ms: Mapped[float | None] = mapped_column(Float)
    llm_tokens_prompt: Mapped[int | None] = mapped_column(Integer)
    llm_tokens_completion: Mapped[int | None] = mapped_column(Integer)
    llm_tokens_total: Mapped[int | None] = mapped_column(Integer)
    error_message: Mapped[str | None] = mapped_column(Text)
