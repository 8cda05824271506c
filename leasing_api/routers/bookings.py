"""Tour booking endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..core.container import AppServices, get_services, new_request_id
from ..schemas import bookings as schemas

router = APIRouter()


@router.post("/book-tour", response_model=schemas.BookTourResponse, response_model_exclude_none=True)
async def book_tour(
    payload: schemas.BookTourRequest,
    services: AppServices = Depends(get_services),
):
    """Reserve a seat on a tour slot."""

    request_id = new_request_id()
    result = await services.bookings.book_tour_slot(
        community_id=payload.community_id,
        slot_time=payload.slot_time,
        lead_name=payload.lead_name,
        lead_email=payload.lead_email,
        lead_phone=payload.lead_phone,
    )
    if not result.success:
        body = schemas.BookTourResponse(success=False, error=result.reason, request_id=request_id)
        return JSONResponse(status_code=409, content=body.model_dump(exclude_none=True))

    return schemas.BookTourResponse(
        success=True,
        booking_id=result.booking_id,
        message="Tour booked successfully",
        request_id=request_id,
    )


@router.get("/bookings", response_model=schemas.BookingListResponse)
async def list_bookings(
    community_id: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    services: AppServices = Depends(get_services),
) -> schemas.BookingListResponse:
    bookings = await services.bookings.list_bookings(community_id=community_id, limit=limit, offset=offset)
    return schemas.BookingListResponse(bookings=bookings, total=len(bookings), request_id=new_request_id())


@router.get("/bookings/{booking_id}", response_model=schemas.BookingDetailResponse)
async def get_booking(
    booking_id: str,
    services: AppServices = Depends(get_services),
):
    request_id = new_request_id()
    booking = await services.bookings.get_booking(booking_id)
    if booking is None:
        return JSONResponse(status_code=404, content={"error": "Booking not found", "request_id": request_id})
    return schemas.BookingDetailResponse(booking=booking, request_id=request_id)


@router.post(
    "/bookings/{booking_id}/cancel",
    response_model=schemas.CancelBookingResponse,
    response_model_exclude_none=True,
)
async def cancel_booking(
    booking_id: str,
    services: AppServices = Depends(get_services),
):
    """Cancel a booking; cancelling twice is rejected rather than repeated."""

    request_id = new_request_id()
    if not await services.bookings.cancel_booking(booking_id):
        body = schemas.CancelBookingResponse(
            success=False,
            error="Booking not found or already cancelled",
            request_id=request_id,
        )
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

    return schemas.CancelBookingResponse(
        success=True,
        message="Booking cancelled successfully",
        request_id=request_id,
    )
