from __future__ import annotations

from leasing_api.schemas.chat import ChatAction
from leasing_api.services.classifier import classify
from leasing_api.services.tools import TOOL_UNAVAILABLE_MESSAGE, ToolInvocation

SLOTS = ["2025-08-28T10:00:00Z", "2025-08-28T14:00:00Z"]


def _slots_lookup(result, error=None) -> ToolInvocation:
    return ToolInvocation(name="get_available_tour_slots", args={"community_id": "sunset-ridge"}, result=result, error=error)


def test_tour_slot_results_propose_a_tour() -> None:
    result = classify("Here are some available times", [_slots_lookup(SLOTS)])

    assert result.action is ChatAction.PROPOSE_TOUR
    assert result.proposed_time == "2025-08-28T10:00:00Z"
    assert result.available_times == SLOTS


def test_tour_evidence_outranks_text_cues() -> None:
    result = classify("Sorry, I can't be sure. Could you pick one?", [_slots_lookup(SLOTS)])

    assert result.action is ChatAction.PROPOSE_TOUR


def test_clarification_phrase() -> None:
    result = classify("Could you tell me how many bedrooms you need?", [])

    assert result.action is ChatAction.ASK_CLARIFICATION
    assert result.proposed_time is None
    assert result.available_times is None


def test_question_with_question_word_is_clarification() -> None:
    assert classify("Which floor plan do you prefer?", []).action is ChatAction.ASK_CLARIFICATION
    assert classify("What is your move-in date?", []).action is ChatAction.ASK_CLARIFICATION


def test_clarification_wins_over_handoff_cues() -> None:
    result = classify("I'm not sure, could you clarify which office you meant? Please contact us.", [])

    assert result.action is ChatAction.ASK_CLARIFICATION


def test_handoff_phrases() -> None:
    assert classify("Please contact our leasing office for that.", []).action is ChatAction.HANDOFF_HUMAN
    assert classify("You can speak with an agent tomorrow.", []).action is ChatAction.HANDOFF_HUMAN
    assert classify("I am unable to help with that.", []).action is ChatAction.HANDOFF_HUMAN
    assert classify("Sorry, I can't answer that.", []).action is ChatAction.HANDOFF_HUMAN


def test_unmatched_text_defaults_to_clarification() -> None:
    result = classify("Unit 12B has a lovely balcony.", [])

    assert result.action is ChatAction.ASK_CLARIFICATION


def test_empty_or_failed_slot_lookups_are_not_evidence() -> None:
    failed = _slots_lookup({"error": TOOL_UNAVAILABLE_MESSAGE}, error="get_available_tour_slots timed out")
    empty = _slots_lookup([])
    other = ToolInvocation(name="check_availability", args={}, result=["12B"])

    result = classify("Nothing to report.", [failed, empty, other])

    assert result.action is ChatAction.ASK_CLARIFICATION
