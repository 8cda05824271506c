"""Schemas for the domain operations exposed to the reasoning oracle."""
from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class UnitAvailability(BaseModel):
    unit_id: str
    unit_number: str
    description: str | None = None
    bedrooms: int
    bathrooms: float
    sqft: int | None = None
    available: bool


class PetPolicyResult(BaseModel):
    pet_type: str
    allowed: bool
    fee: float = 0
    notes: str | None = None
    restrictions: list[str] = Field(default_factory=list)


class PricingFees(BaseModel):
    application: float = 0
    admin: float = 0


class PricingResult(BaseModel):
    unit_id: str
    rent: float
    deposit: float
    fees: PricingFees
    special: str | None = None
    effective_date: date


class CheckAvailability(BaseModel):
    """Available units in a community, optionally filtered by bedroom count."""

    tool: Literal["check_availability"] = "check_availability"
    community_id: str = Field(min_length=1)
    bedrooms: int | None = Field(default=None, ge=0)


class CheckPetPolicy(BaseModel):
    """Pet policy for a specific pet type in a community."""

    tool: Literal["check_pet_policy"] = "check_pet_policy"
    community_id: str = Field(min_length=1)
    pet_type: str = Field(min_length=1)


class GetPricing(BaseModel):
    """Pricing information for a specific unit."""

    tool: Literal["get_pricing"] = "get_pricing"
    community_id: str = Field(min_length=1)
    unit_id: str = Field(min_length=1)
    move_in_date: str | None = None


class GetTourSlots(BaseModel):
    """Upcoming tour time slots for a community."""

    tool: Literal["get_available_tour_slots"] = "get_available_tour_slots"
    community_id: str = Field(min_length=1)
    limit: int = Field(default=5, ge=1)


ToolCall = Annotated[
    Union[CheckAvailability, CheckPetPolicy, GetPricing, GetTourSlots],
    Field(discriminator="tool"),
]

tool_call_adapter: TypeAdapter[ToolCall] = TypeAdapter(ToolCall)
