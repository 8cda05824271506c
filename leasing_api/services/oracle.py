"""Reasoning oracle built on Gemini function calling."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Literal, Protocol, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from ..core.config import Settings

logger = logging.getLogger(__name__)


class OracleUnavailableError(RuntimeError):
    """Raised when no configured Gemini models are available."""


class OracleResponseError(RuntimeError):
    """Raised when the oracle answers with nothing usable."""


@dataclass(slots=True)
class FunctionCall:
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class TokenUsage:
    prompt: int = 0
    completion: int = 0
    total: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt=self.prompt + other.prompt,
            completion=self.completion + other.completion,
            total=self.total + other.total,
        )


@dataclass(slots=True)
class OracleReply:
    text: str
    function_calls: list[FunctionCall] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str | None = None
    raw_content: Any = None


@dataclass(slots=True)
class FunctionResult:
    name: str
    payload: dict[str, Any]


@dataclass(slots=True)
class TranscriptEntry:
    """One turn of the exchange with the oracle."""

    role: Literal["user", "model", "tool"]
    text: str = ""
    function_calls: list[FunctionCall] = field(default_factory=list)
    function_results: list[FunctionResult] = field(default_factory=list)
    raw_content: Any = None

    @classmethod
    def user(cls, text: str) -> "TranscriptEntry":
        return cls(role="user", text=text)

    @classmethod
    def from_reply(cls, reply: OracleReply) -> "TranscriptEntry":
        return cls(
            role="model",
            text=reply.text,
            function_calls=list(reply.function_calls),
            raw_content=reply.raw_content,
        )

    @classmethod
    def results(cls, results: Sequence[FunctionResult]) -> "TranscriptEntry":
        return cls(role="tool", function_results=list(results))


class ReasoningOracle(Protocol):
    """Text generation service that may request domain function calls."""

    async def complete(
        self,
        *,
        system: str,
        transcript: Sequence[TranscriptEntry],
        tools: Sequence[dict[str, Any]],
    ) -> OracleReply: ...


class GeminiOracle:
    """Gemini-backed oracle with model fallbacks."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def _has_api_key(self) -> bool:
        return bool(self._settings.gemini_api_key.strip())

    def _candidates(self) -> list[str]:
        candidates: list[str] = []
        seen: set[str] = set()
        for candidate in (self._settings.gemini_model, *self._settings.gemini_model_fallbacks):
            candidate = candidate.strip()
            if candidate and candidate not in seen:
                candidates.append(candidate)
                seen.add(candidate)
        return candidates

    def _build_model(self, name: str, system: str, tools: Sequence[dict[str, Any]]) -> genai.GenerativeModel:
        """Return a Gemini model bound to the directive and tool set."""

        _configure_api(self._settings.gemini_api_key)
        return genai.GenerativeModel(
            name,
            system_instruction=system,
            tools=[{"function_declarations": list(tools)}] if tools else None,
            generation_config=genai.GenerationConfig(
                temperature=self._settings.oracle_temperature,
                max_output_tokens=self._settings.oracle_max_output_tokens,
            ),
        )

    async def complete(
        self,
        *,
        system: str,
        transcript: Sequence[TranscriptEntry],
        tools: Sequence[dict[str, Any]],
    ) -> OracleReply:
        if not self._has_api_key():
            raise OracleUnavailableError("GEMINI_API_KEY is missing")

        loop = asyncio.get_running_loop()
        contents = [_to_content(entry) for entry in transcript]
        last_error: Exception | None = None

        for model_name in self._candidates():
            def _run_inference(current_model: str = model_name) -> OracleReply:
                response = self._build_model(current_model, system, tools).generate_content(contents)
                return _parse_response(response, current_model)

            try:
                return await loop.run_in_executor(None, _run_inference)
            except google_exceptions.NotFound as exc:
                logger.warning("Gemini model %s not available: %s", model_name, exc)
                last_error = exc
                continue
            except Exception as exc:  # noqa: BLE001
                logger.exception("Gemini generate_content failed for %s", model_name)
                last_error = exc
                continue

        raise OracleUnavailableError("No Gemini models responded") from last_error


@lru_cache
def _configure_api(api_key: str) -> bool:
    """Configure the Google Generative AI client once per key."""

    genai.configure(api_key=api_key)
    return True


def _to_content(entry: TranscriptEntry) -> Any:
    if entry.role == "user":
        return {"role": "user", "parts": [entry.text]}

    if entry.role == "model":
        if entry.raw_content is not None:
            return entry.raw_content
        parts: list[Any] = []
        if entry.text:
            parts.append(genai.protos.Part(text=entry.text))
        for call in entry.function_calls:
            parts.append(genai.protos.Part(function_call=genai.protos.FunctionCall(name=call.name, args=call.args)))
        return genai.protos.Content(role="model", parts=parts)

    return genai.protos.Content(
        role="user",
        parts=[
            genai.protos.Part(
                function_response=genai.protos.FunctionResponse(name=result.name, response=result.payload)
            )
            for result in entry.function_results
        ],
    )


def _parse_response(response: Any, model_name: str) -> OracleReply:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise OracleUnavailableError(f"Gemini model {model_name} returned no candidates")

    content = candidates[0].content
    texts: list[str] = []
    calls: list[FunctionCall] = []
    for part in content.parts:
        function_call = getattr(part, "function_call", None)
        if function_call and function_call.name:
            calls.append(FunctionCall(name=function_call.name, args=_plain(function_call.args)))
        elif getattr(part, "text", ""):
            texts.append(part.text)

    usage = TokenUsage()
    metadata = getattr(response, "usage_metadata", None)
    if metadata is not None:
        usage = TokenUsage(
            prompt=int(getattr(metadata, "prompt_token_count", 0) or 0),
            completion=int(getattr(metadata, "candidates_token_count", 0) or 0),
            total=int(getattr(metadata, "total_token_count", 0) or 0),
        )

    return OracleReply(
        text="".join(texts).strip(),
        function_calls=calls,
        usage=usage,
        model=model_name,
        raw_content=content,
    )


def _plain(value: Any) -> Any:
    """Convert protobuf map/list composites into plain Python containers."""

    if hasattr(value, "items"):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)) or (hasattr(value, "__iter__") and not isinstance(value, (str, bytes))):
        return [_plain(item) for item in value]
    return value
