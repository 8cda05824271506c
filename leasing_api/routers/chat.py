"""Conversational reply endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from ..core.container import AppServices, get_services, new_request_id
from ..schemas.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reply", response_model=ChatResponse, response_model_exclude_none=True)
async def reply(
    payload: ChatRequest,
    response: Response,
    services: AppServices = Depends(get_services),
) -> ChatResponse:
    """Answer a prospect's message and suggest the next UI action."""

    request_id = new_request_id()
    logger.info("Request %s: reply for community %s", request_id, payload.community_id)
    response.headers["X-Request-ID"] = request_id
    return await services.agent.process_message(payload, request_id)
