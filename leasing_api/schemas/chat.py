"""Schemas for the conversational reply endpoint."""
from __future__ import annotations

import enum

from pydantic import BaseModel, Field, field_validator


class ChatAction(str, enum.Enum):
    PROPOSE_TOUR = "propose_tour"
    ASK_CLARIFICATION = "ask_clarification"
    HANDOFF_HUMAN = "handoff_human"


class LeadInfo(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)


class Preferences(BaseModel):
    bedrooms: int | None = Field(default=None, ge=0)
    move_in: str | None = None


class ChatRequest(BaseModel):
    lead: LeadInfo
    message: str
    preferences: Preferences = Field(default_factory=Preferences)
    community_id: str = Field(min_length=1)

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be empty")
        return value


class ChatResponse(BaseModel):
    reply: str
    action: ChatAction
    proposed_time: str | None = None
    available_times: list[str] | None = None
