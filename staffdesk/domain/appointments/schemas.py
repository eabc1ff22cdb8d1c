"""Appointment domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from .status import ALLOWED_STATUSES, AppointmentStatus


class RecipientSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_note: Optional[str] = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    recipient_id: int
    appointment_date: date
    appointment_time: str
    status: str
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    recipient: Optional[RecipientSummary] = None

    class Config:
        from_attributes = True


class AppointmentCreate(BaseModel):
    """Admin-created appointment; any allowed status, default pending"""

    recipient_id: int
    appointment_date: date
    appointment_time: str
    status: str = AppointmentStatus.PENDING.value


class StatusUpdate(BaseModel):
    # Checked against the allow-list in the service so the error can name it
    status: str = Field(..., description=f"One of: {', '.join(ALLOWED_STATUSES)}")


class StatusHistoryResponse(BaseModel):
    id: int
    appointment_id: int
    old_status: Optional[str]
    new_status: str
    changed_at: Optional[datetime]

    class Config:
        from_attributes = True


class BlockedTimeCreate(BaseModel):
    block_date: date
    block_time: str
    reason: Optional[str] = None


class BlockedTimeResponse(BaseModel):
    id: int
    block_date: date
    block_time: str
    reason: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Public booking flow


class BookingRequest(BaseModel):
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None


class BookingPageResponse(BaseModel):
    first_name: str
    last_name: str
    available_dates: list[date]


class BookingSlotsResponse(BaseModel):
    appointment_date: date
    slots: list[str]
    fully_booked: bool


class BookingResponse(BaseModel):
    appointment: AppointmentResponse
    notification_sent: bool
    message: str
