"""Public booking endpoints - authorized by the recipient's booking token only"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from ...rate_limiter import create_rate_limiter
from .router import get_appointment_service
from .schemas import (
    AppointmentResponse,
    BookingPageResponse,
    BookingRequest,
    BookingResponse,
    BookingSlotsResponse,
)
from .service import AppointmentService

router = APIRouter(prefix="/booking", tags=["Booking"])

rate_limit_booking_reads = create_rate_limiter(limit=60, window_seconds=60, key_prefix="booking_read")
rate_limit_booking_writes = create_rate_limiter(limit=10, window_seconds=60, key_prefix="booking_write")


@router.get("/{token}", response_model=BookingPageResponse)
async def get_booking_page(
    token: str,
    _: None = Depends(rate_limit_booking_reads),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Recipient greeting and the dates that still have free slots"""
    return service.get_booking_page(token)


@router.get("/{token}/slots", response_model=BookingSlotsResponse)
async def get_booking_slots(
    token: str,
    slot_date: date = Query(..., alias="date"),
    _: None = Depends(rate_limit_booking_reads),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_booking_slots(token, slot_date)


@router.post("/{token}", response_model=BookingResponse, status_code=201)
async def book_appointment(
    token: str,
    data: BookingRequest,
    _: None = Depends(rate_limit_booking_writes),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = await service.book(token, data)
    return BookingResponse(
        appointment=AppointmentResponse.model_validate(result["appointment"]),
        notification_sent=result["notification_sent"],
        message=result["message"],
    )
