"""Booking router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Header, Query, Request

from ...identity import Identity, get_identity
from ...rate_limiter import limit_booking_creation
from .schemas import BookingConfirm, BookingCreate, BookingListResponse, BookingResponse
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["Bookings"])


def get_booking_service(request: Request) -> BookingService:
    """Dependency injection for BookingService"""
    return request.app.state.booking_service


# ============================================================================
# PUBLIC BOOKING LIFECYCLE
# ============================================================================


@router.post(
    "/bookings",
    status_code=201,
    response_model=BookingResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(limit_booking_creation)],
)
def create_booking(
    data: BookingCreate,
    idempotency_key: Optional[str] = Header(None),
    service: BookingService = Depends(get_booking_service),
):
    """Create a pending booking; the response carries the confirmation code"""
    booking = service.create_booking(data, idempotency_key)
    return {
        **booking,
        "message": "Booking created successfully. Please check your email for confirmation.",
    }


@router.get("/bookings/{booking_id}", response_model=BookingResponse, response_model_exclude_none=True)
def get_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    """Get a booking by ID"""
    return service.get_booking(booking_id)


@router.post(
    "/bookings/{booking_id}/confirm",
    response_model=BookingResponse,
    response_model_exclude_none=True,
)
def confirm_booking(
    booking_id: str,
    data: Optional[BookingConfirm] = Body(None),
    service: BookingService = Depends(get_booking_service),
):
    """Confirm a pending booking"""
    booking = service.confirm_booking(booking_id, data.confirmationCode if data else None)
    return {**booking, "message": "Booking confirmed successfully"}


# ============================================================================
# PRACTICE DASHBOARD
# ============================================================================


@router.get(
    "/practices/{practice_id}/bookings",
    response_model=BookingListResponse,
    response_model_exclude_none=True,
)
def list_practice_bookings(
    practice_id: str,
    start_from: Optional[str] = Query(None, alias="from", description="Earliest slot start"),
    start_to: Optional[str] = Query(None, alias="to", description="Latest slot start"),
    status: Optional[str] = Query(None, description="Filter by booking status"),
    identity: Identity = Depends(get_identity),
    service: BookingService = Depends(get_booking_service),
):
    """Get bookings for the caller's practice"""
    bookings = service.list_practice_bookings(practice_id, identity, start_from, start_to, status)
    return {"bookings": bookings, "count": len(bookings)}
