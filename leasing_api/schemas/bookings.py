"""Schemas for tour booking endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..models.booking import BookingStatus


class BookTourRequest(BaseModel):
    community_id: str = Field(min_length=1)
    slot_time: datetime
    lead_name: str = Field(min_length=1)
    lead_email: str = Field(min_length=1)
    lead_phone: str | None = None


class BookTourResponse(BaseModel):
    success: bool
    booking_id: str | None = None
    message: str | None = None
    error: str | None = None
    request_id: str


class BookingDetail(BaseModel):
    booking_id: str
    community_id: str
    community_name: str
    lead_name: str
    lead_email: str
    lead_phone: str | None = None
    status: BookingStatus
    notes: str | None = None
    slot_time: datetime
    max_capacity: int
    current_bookings: int
    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    bookings: list[BookingDetail]
    total: int
    request_id: str


class BookingDetailResponse(BaseModel):
    booking: BookingDetail
    request_id: str


class CancelBookingResponse(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
    request_id: str
