"""Conversation orchestrator for the leasing assistant.

One inquiry is one stateless exchange: ask the oracle, run any tools it
requests, feed the results back, then classify the final reply into a UI
action. Every call ends in a well-formed response and exactly one outcome
log entry, whatever fails along the way.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field

from ..schemas.chat import ChatAction, ChatRequest, ChatResponse
from .classifier import classify
from .oracle import OracleReply, OracleResponseError, ReasoningOracle, TokenUsage, TranscriptEntry
from .request_log import LogEntry, RequestLogger
from .tools import ToolBridge, ToolInvocation

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "I'm sorry, I'm experiencing technical difficulties. Please try again in a moment "
    "or contact our leasing office directly."
)

SYSTEM_PROMPT = """You are a helpful and knowledgeable leasing assistant for a residential community.

Your job:
1. Answer questions about available units, pricing, fees and pet policies.
2. Offer tours when the prospect wants to visit.
3. Keep replies clear, friendly, accurate and brief.

Rules:
- Use the tools for every fact about units, prices, pets or tour times. Never guess numbers.
- When the prospect mentions a tour, visit, viewing, appointment or seeing the property, call get_available_tour_slots and offer several of the returned times.
- If you need more details to help, ask one specific question.
- If the request cannot be handled with the tools, suggest contacting the leasing office.

Community: {community_id}
Lead: {lead_name}
Lead preferences: {preferences}"""


@dataclass
class _Exchange:
    transcript: list[TranscriptEntry] = field(default_factory=list)
    invocations: list[ToolInvocation] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)


def build_system_prompt(request: ChatRequest) -> str:
    preferences = json.dumps(request.preferences.model_dump(exclude_none=True))
    return SYSTEM_PROMPT.format(
        community_id=request.community_id,
        lead_name=request.lead.name,
        preferences=preferences,
    )


def fallback_response() -> ChatResponse:
    return ChatResponse(reply=FALLBACK_REPLY, action=ChatAction.HANDOFF_HUMAN)


class LeasingAgent:
    """Sequences oracle, tools and classification for one inquiry."""

    def __init__(
        self,
        oracle: ReasoningOracle,
        bridge: ToolBridge,
        request_logger: RequestLogger,
        *,
        oracle_timeout_seconds: float = 20.0,
        max_rounds: int = 3,
    ) -> None:
        self._oracle = oracle
        self._bridge = bridge
        self._request_logger = request_logger
        self._oracle_timeout = oracle_timeout_seconds
        self._max_rounds = max(1, max_rounds)

    async def process_message(self, request: ChatRequest, request_id: str) -> ChatResponse:
        """Return the reply and next action. Never raises."""

        started = time.perf_counter()
        exchange = _Exchange()
        error: str | None = None

        try:
            response = await self._converse(request, request_id, exchange)
        except Exception as exc:  # noqa: BLE001 - any failure becomes a handoff
            logger.exception("Leasing agent failed for request %s", request_id)
            error = _describe_error(exc)
            response = fallback_response()

        latency_ms = (time.perf_counter() - started) * 1000
        await self._record_outcome(
            LogEntry.now(
                request_id,
                llm_latency_ms=latency_ms,
                llm_tokens_prompt=exchange.usage.prompt,
                llm_tokens_completion=exchange.usage.completion,
                llm_tokens_total=exchange.usage.total,
                error_message=error,
            )
        )
        return response

    async def _converse(self, request: ChatRequest, request_id: str, exchange: _Exchange) -> ChatResponse:
        system = build_system_prompt(request)
        exchange.transcript.append(TranscriptEntry.user(request.message.strip()))

        reply = await self._ask(system, exchange)
        rounds = 1
        while reply.function_calls:
            invocations = await self._bridge.execute_all(
                reply.function_calls, default_community_id=request.community_id
            )
            for invocation in invocations:
                exchange.invocations.append(invocation)
                await self._request_logger.record(
                    LogEntry.now(
                        request_id,
                        tool_name=invocation.name,
                        tool_args=invocation.args,
                        tool_response=invocation.result,
                        error_message=invocation.error,
                    )
                )

            exchange.transcript.append(TranscriptEntry.from_reply(reply))
            exchange.transcript.append(
                TranscriptEntry.results([invocation.to_function_result() for invocation in invocations])
            )
            if rounds >= self._max_rounds:
                logger.warning("Request %s still requesting tools after %d rounds", request_id, rounds)
                break
            reply = await self._ask(system, exchange)
            rounds += 1

        text = reply.text.strip()
        if not text:
            raise OracleResponseError("Oracle returned no reply text")

        result = classify(text, exchange.invocations)
        if result.action is ChatAction.PROPOSE_TOUR:
            return ChatResponse(
                reply=text,
                action=result.action,
                proposed_time=result.proposed_time,
                available_times=result.available_times,
            )
        return ChatResponse(reply=text, action=result.action)

    async def _ask(self, system: str, exchange: _Exchange) -> OracleReply:
        reply = await asyncio.wait_for(
            self._oracle.complete(
                system=system,
                transcript=list(exchange.transcript),
                tools=self._bridge.declarations,
            ),
            self._oracle_timeout,
        )
        exchange.usage = exchange.usage + reply.usage
        return reply

    async def _record_outcome(self, entry: LogEntry) -> None:
        try:
            await self._request_logger.record(entry)
        except Exception:  # noqa: BLE001 - the caller still gets its response
            logger.exception("Could not persist outcome log for request %s", entry.request_id)


def _describe_error(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "Oracle request timed out"
    message = str(exc).strip()
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__
