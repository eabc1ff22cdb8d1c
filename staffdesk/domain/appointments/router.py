"""Appointment router - admin endpoints for appointments and blocked times"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_admin
from ...database import get_db
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    BlockedTimeCreate,
    BlockedTimeResponse,
    StatusHistoryResponse,
    StatusUpdate,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])
blocked_times_router = APIRouter(prefix="/blocked-times", tags=["Blocked Times"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# APPOINTMENTS
# ============================================================================


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    date_filter: Optional[date] = Query(None, alias="date"),
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.list_appointments(date_filter)


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.create_appointment(data)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_appointment(appointment_id)


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: StatusUpdate,
    admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    logger.info(f"🔄 {admin.email} sets appointment {appointment_id} to {data.status!r}")
    return service.update_status(appointment_id, data.status)


@router.get("/{appointment_id}/history", response_model=list[StatusHistoryResponse])
async def get_status_history(
    appointment_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_status_history(appointment_id)


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id)


@router.post("/{appointment_id}/missed-email")
async def send_missed_appointment_email(
    appointment_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.send_missed_email(appointment_id)


# ============================================================================
# BLOCKED TIMES
# ============================================================================


@blocked_times_router.get("", response_model=list[BlockedTimeResponse])
async def list_blocked_times(
    start: Optional[date] = None,
    end: Optional[date] = None,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.list_blocked_times(start, end)


@blocked_times_router.post("", response_model=BlockedTimeResponse, status_code=201)
async def create_blocked_time(
    data: BlockedTimeCreate,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.create_blocked_time(data)


@blocked_times_router.delete("/{blocked_time_id}")
async def delete_blocked_time(
    blocked_time_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_blocked_time(blocked_time_id)
