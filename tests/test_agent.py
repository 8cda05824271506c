"""Conversation orchestrator behaviour with a scripted oracle."""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from leasing_api.models import RequestLog
from leasing_api.schemas.chat import ChatAction, ChatRequest
from leasing_api.services.agent import FALLBACK_REPLY, LeasingAgent, build_system_prompt
from leasing_api.services.domain import DomainQueryService, StorageUnavailableError, format_timestamp
from leasing_api.services.oracle import FunctionCall, OracleReply, OracleUnavailableError, TokenUsage
from leasing_api.services.request_log import RequestLogger
from leasing_api.services.tools import ToolBridge

from conftest import COMMUNITY_ID, frozen_clock


class ScriptedOracle:
    """Returns canned replies in order and records what it was sent."""

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.calls: list[dict] = []

    async def complete(self, *, system, transcript, tools):
        self.calls.append({"system": system, "transcript": list(transcript), "tools": tools})
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class HangingOracle:
    async def complete(self, *, system, transcript, tools):
        await asyncio.sleep(10)


def _request(message: str = "Can I see the place this week?") -> ChatRequest:
    return ChatRequest.model_validate(
        {
            "lead": {"name": "Ada", "email": "ada@example.com"},
            "message": message,
            "preferences": {"bedrooms": 2},
            "community_id": COMMUNITY_ID,
        }
    )


def _agent(session_factory, oracle, **kwargs) -> LeasingAgent:
    domain = DomainQueryService(session_factory, clock=frozen_clock)
    return LeasingAgent(oracle, ToolBridge(domain), RequestLogger(session_factory), **kwargs)


async def _logs(session_factory) -> list[RequestLog]:
    async with session_factory() as session:
        result = await session.scalars(select(RequestLog).order_by(RequestLog.id))
        return list(result.all())


@pytest.mark.asyncio
async def test_tour_lookup_round_proposes_times(session_factory, slot_times) -> None:
    oracle = ScriptedOracle(
        OracleReply(
            text="",
            function_calls=[FunctionCall(name="get_available_tour_slots", args={"limit": 3})],
            usage=TokenUsage(prompt=100, completion=10, total=110),
        ),
        OracleReply(text="Here are some available times.", usage=TokenUsage(prompt=150, completion=20, total=170)),
    )
    agent = _agent(session_factory, oracle)

    response = await agent.process_message(_request(), "req-1")

    expected = [format_timestamp(slot) for slot in slot_times[:3]]
    assert response.action is ChatAction.PROPOSE_TOUR
    assert response.reply == "Here are some available times."
    assert response.available_times == expected
    assert response.proposed_time == expected[0]

    follow_up = oracle.calls[1]["transcript"]
    assert [entry.role for entry in follow_up] == ["user", "model", "tool"]
    assert follow_up[2].function_results[0].payload == {"result": expected}

    logs = await _logs(session_factory)
    assert [log.tool_name for log in logs] == ["get_available_tour_slots", None]
    assert logs[0].tool_args == {"community_id": COMMUNITY_ID, "limit": 3}
    assert logs[0].tool_response == expected
    assert logs[1].llm_tokens_total == 280
    assert logs[1].error_message is None
    assert {log.request_id for log in logs} == {"req-1"}


@pytest.mark.asyncio
async def test_plain_reply_is_classified_without_tools(session_factory) -> None:
    oracle = ScriptedOracle(OracleReply(text="Could you tell me how many bedrooms you need?"))
    agent = _agent(session_factory, oracle)

    response = await agent.process_message(_request("Hi there"), "req-2")

    assert response.action is ChatAction.ASK_CLARIFICATION
    assert response.proposed_time is None
    assert response.available_times is None
    assert len(await _logs(session_factory)) == 1


@pytest.mark.asyncio
async def test_oracle_timeout_returns_fallback_and_logs_error(session_factory) -> None:
    agent = _agent(session_factory, HangingOracle(), oracle_timeout_seconds=0.01)

    response = await agent.process_message(_request(), "req-3")

    assert response.reply == FALLBACK_REPLY
    assert response.action is ChatAction.HANDOFF_HUMAN
    logs = await _logs(session_factory)
    assert len(logs) == 1
    assert logs[0].error_message
    assert logs[0].llm_latency_ms is not None


@pytest.mark.asyncio
async def test_oracle_unavailable_returns_fallback(session_factory) -> None:
    agent = _agent(session_factory, ScriptedOracle(OracleUnavailableError("GEMINI_API_KEY is missing")))

    response = await agent.process_message(_request(), "req-4")

    assert response.action is ChatAction.HANDOFF_HUMAN
    logs = await _logs(session_factory)
    assert "GEMINI_API_KEY" in logs[0].error_message


@pytest.mark.asyncio
async def test_empty_final_reply_falls_back(session_factory) -> None:
    agent = _agent(session_factory, ScriptedOracle(OracleReply(text="   ")))

    response = await agent.process_message(_request(), "req-5")

    assert response.reply == FALLBACK_REPLY


@pytest.mark.asyncio
async def test_tool_failure_still_lets_oracle_answer(session_factory) -> None:
    domain = AsyncMock()
    domain.get_pricing.side_effect = StorageUnavailableError("get_pricing timed out")
    oracle = ScriptedOracle(
        OracleReply(text="", function_calls=[FunctionCall(name="get_pricing", args={"unit_id": "12B"})]),
        OracleReply(text="I'm unable to look up pricing right now."),
    )
    agent = LeasingAgent(oracle, ToolBridge(domain), RequestLogger(session_factory))

    response = await agent.process_message(_request("How much is 12B?"), "req-6")

    assert response.action is ChatAction.HANDOFF_HUMAN
    assert response.reply == "I'm unable to look up pricing right now."
    payload = oracle.calls[1]["transcript"][2].function_results[0].payload
    assert payload == {"error": "Unable to retrieve information at this time"}

    logs = await _logs(session_factory)
    assert logs[0].tool_name == "get_pricing"
    assert logs[0].error_message == "get_pricing timed out"
    assert logs[1].error_message is None


@pytest.mark.asyncio
async def test_tool_rounds_are_bounded(session_factory) -> None:
    looping = OracleReply(text="", function_calls=[FunctionCall(name="check_availability", args={})])
    oracle = ScriptedOracle(looping, looping)
    agent = _agent(session_factory, oracle, max_rounds=2)

    response = await agent.process_message(_request(), "req-7")

    assert len(oracle.calls) == 2
    assert response.reply == FALLBACK_REPLY


@pytest.mark.asyncio
async def test_outcome_log_failure_does_not_raise(session_factory) -> None:
    request_logger = AsyncMock()
    request_logger.record.side_effect = StorageUnavailableError("record_request_log failed")
    domain = DomainQueryService(session_factory, clock=frozen_clock)
    agent = LeasingAgent(ScriptedOracle(OracleReply(text="Unit 12B is lovely.")), ToolBridge(domain), request_logger)

    response = await agent.process_message(_request(), "req-8")

    assert response.reply == "Unit 12B is lovely."
    request_logger.record.assert_awaited_once()


def test_system_prompt_carries_inquiry_context() -> None:
    prompt = build_system_prompt(_request())

    assert COMMUNITY_ID in prompt
    assert "Ada" in prompt
    assert '"bedrooms": 2' in prompt
