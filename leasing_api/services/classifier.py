"""Map the oracle's final reply and tool evidence onto a UI action."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..schemas.chat import ChatAction
from .tools import TOUR_SLOTS_TOOL, ToolInvocation

CLARIFICATION_PHRASES = ("could you", "can you tell me", "more information")
QUESTION_WORDS = ("what", "which")
HANDOFF_PAIRS = (("contact", "office"), ("speak", "agent"), ("sorry", "can't"))
HANDOFF_PHRASES = ("unable",)


@dataclass(slots=True)
class Classification:
    action: ChatAction
    proposed_time: str | None = None
    available_times: list[str] | None = None


def classify(reply_text: str, invocations: Sequence[ToolInvocation]) -> Classification:
    """Pick exactly one action; the first matching rule wins.

    Retrieved tour slots outrank anything the prose says. Text that matches
    neither the clarification nor the handoff cues falls back to asking for
    clarification rather than handing off or promising a tour.
    """

    slots = extract_tour_slots(invocations)
    if slots:
        return Classification(
            action=ChatAction.PROPOSE_TOUR,
            proposed_time=slots[0],
            available_times=slots,
        )

    text = reply_text.lower()
    if is_asking_for_clarification(text):
        return Classification(action=ChatAction.ASK_CLARIFICATION)
    if should_handoff_to_human(text):
        return Classification(action=ChatAction.HANDOFF_HUMAN)
    return Classification(action=ChatAction.ASK_CLARIFICATION)


def extract_tour_slots(invocations: Sequence[ToolInvocation]) -> list[str]:
    """Return the first non-empty tour slot list captured from a successful lookup."""

    for invocation in invocations:
        if invocation.name != TOUR_SLOTS_TOOL or not invocation.succeeded:
            continue
        result = invocation.result
        if isinstance(result, list) and result:
            return [str(item) for item in result]
    return []


def is_asking_for_clarification(text: str) -> bool:
    if any(phrase in text for phrase in CLARIFICATION_PHRASES):
        return True
    return "?" in text and any(word in text for word in QUESTION_WORDS)


def should_handoff_to_human(text: str) -> bool:
    if any(phrase in text for phrase in HANDOFF_PHRASES):
        return True
    return any(first in text and second in text for first, second in HANDOFF_PAIRS)
