"""Domain operations exposed to the reasoning oracle as callable tools."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from pydantic import ValidationError

from ..schemas import tools as schemas
from .domain import DomainQueryService, StorageUnavailableError, format_timestamp
from .oracle import FunctionCall, FunctionResult

logger = logging.getLogger(__name__)

TOUR_SLOTS_TOOL = "get_available_tour_slots"
TOOL_UNAVAILABLE_MESSAGE = "Unable to retrieve information at this time"

TOOL_DECLARATIONS: list[dict[str, Any]] = [
    {
        "name": "check_availability",
        "description": "Check available units in a community, optionally filtered by bedroom count.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "community_id": {"type": "STRING", "description": "The community identifier"},
                "bedrooms": {"type": "INTEGER", "description": "Number of bedrooms (optional filter)"},
            },
            "required": ["community_id"],
        },
    },
    {
        "name": "check_pet_policy",
        "description": "Check the pet policy for a specific pet type in a community.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "community_id": {"type": "STRING", "description": "The community identifier"},
                "pet_type": {"type": "STRING", "description": "Type of pet, e.g. cat, dog, bird"},
            },
            "required": ["community_id", "pet_type"],
        },
    },
    {
        "name": "get_pricing",
        "description": "Get rent, deposit, fees and specials for a specific unit.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "community_id": {"type": "STRING", "description": "The community identifier"},
                "unit_id": {"type": "STRING", "description": "The unit identifier, e.g. 12B"},
                "move_in_date": {"type": "STRING", "description": "Desired move-in date (optional)"},
            },
            "required": ["community_id", "unit_id"],
        },
    },
    {
        "name": TOUR_SLOTS_TOOL,
        "description": "Get upcoming tour time slots that still have room, earliest first.",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "community_id": {"type": "STRING", "description": "The community identifier"},
                "limit": {"type": "INTEGER", "description": "Maximum number of slots to return (default 5)"},
            },
            "required": ["community_id"],
        },
    },
]


@dataclass(slots=True)
class ToolInvocation:
    """A tool call requested by the oracle and what came back."""

    name: str
    args: dict[str, Any]
    result: Any = None
    call: schemas.ToolCall | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_function_result(self) -> FunctionResult:
        if self.error is not None:
            return FunctionResult(name=self.name, payload={"error": TOOL_UNAVAILABLE_MESSAGE})
        return FunctionResult(name=self.name, payload={"result": self.result})


@dataclass(slots=True)
class ToolBridge:
    """Parses oracle function calls and runs them against the domain service."""

    domain: DomainQueryService
    declarations: list[dict[str, Any]] = field(default_factory=lambda: TOOL_DECLARATIONS)

    def parse(self, call: FunctionCall, *, default_community_id: str | None = None) -> schemas.ToolCall:
        """Validate an oracle request into one of the known tool variants."""

        arguments = {key: value for key, value in call.args.items() if value is not None}
        if default_community_id and not arguments.get("community_id"):
            arguments["community_id"] = default_community_id
        return schemas.tool_call_adapter.validate_python({**arguments, "tool": call.name})

    async def execute(self, call: FunctionCall, *, default_community_id: str | None = None) -> ToolInvocation:
        invocation = ToolInvocation(name=call.name, args=dict(call.args))
        try:
            parsed = self.parse(call, default_community_id=default_community_id)
        except ValidationError as exc:
            logger.warning("Rejected tool call %s(%s): %s", call.name, call.args, exc.errors())
            invocation.error = f"invalid tool call: {call.name}"
            invocation.result = {"error": TOOL_UNAVAILABLE_MESSAGE}
            return invocation

        invocation.call = parsed
        invocation.args = parsed.model_dump(exclude={"tool"})
        try:
            invocation.result = await self._dispatch(parsed)
        except StorageUnavailableError as exc:
            logger.warning("Tool %s failed: %s", call.name, exc)
            invocation.error = str(exc)
            invocation.result = {"error": TOOL_UNAVAILABLE_MESSAGE}
        except Exception as exc:  # noqa: BLE001 - the oracle only ever sees the placeholder
            logger.exception("Tool %s raised unexpectedly", call.name)
            invocation.error = f"{type(exc).__name__}: {exc}"
            invocation.result = {"error": TOOL_UNAVAILABLE_MESSAGE}
        return invocation

    async def execute_all(
        self, calls: Sequence[FunctionCall], *, default_community_id: str | None = None
    ) -> list[ToolInvocation]:
        """Run calls one after another in the order the oracle asked for them."""

        invocations: list[ToolInvocation] = []
        for call in calls:
            invocations.append(await self.execute(call, default_community_id=default_community_id))
        return invocations

    async def _dispatch(self, call: schemas.ToolCall) -> Any:
        if isinstance(call, schemas.CheckAvailability):
            units = await self.domain.check_availability(call.community_id, call.bedrooms)
            return [unit.model_dump(mode="json") for unit in units]
        if isinstance(call, schemas.CheckPetPolicy):
            policy = await self.domain.check_pet_policy(call.community_id, call.pet_type)
            return policy.model_dump(mode="json") if policy else None
        if isinstance(call, schemas.GetPricing):
            pricing = await self.domain.get_pricing(call.community_id, call.unit_id, call.move_in_date)
            return pricing.model_dump(mode="json") if pricing else None
        if isinstance(call, schemas.GetTourSlots):
            slots = await self.domain.get_available_tour_slots(call.community_id, call.limit)
            return [format_timestamp(slot) for slot in slots]
        raise TypeError(f"Unsupported tool call: {call!r}")
