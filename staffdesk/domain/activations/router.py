"""Activation router - public SMS activation flow and admin phone number management"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_admin
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .schemas import (
    ActivationRequestResponse,
    ActivationStatusResponse,
    ActivationSubmit,
    PhoneNumberCreate,
    PhoneNumberResponse,
)
from .service import ActivationService, serialize_request

router = APIRouter(prefix="/activations", tags=["SMS Activation"])

# PIN guessing protection
rate_limit_submit = create_rate_limiter(limit=5, window_seconds=300, key_prefix="activation_submit")
rate_limit_poll = create_rate_limiter(limit=120, window_seconds=60, key_prefix="activation_poll")


def get_activation_service(db: Session = Depends(get_db)) -> ActivationService:
    """Dependency injection for ActivationService"""
    return ActivationService(db)


def _status_response(request) -> ActivationStatusResponse:
    return ActivationStatusResponse(
        short_id=request.short_id,
        status=request.status,
        phone=request.phone_number.phone,
        sms_code=request.sms_code,
    )


# ============================================================================
# PUBLIC
# ============================================================================


@router.post("/requests", response_model=ActivationStatusResponse, status_code=201)
async def submit_activation_request(
    data: ActivationSubmit,
    _: None = Depends(rate_limit_submit),
    service: ActivationService = Depends(get_activation_service),
):
    request = await service.submit_request(data.phone, data.access_code)
    return _status_response(request)


@router.get("/requests/{short_id}", response_model=ActivationStatusResponse)
async def get_activation_status(
    short_id: str,
    _: None = Depends(rate_limit_poll),
    service: ActivationService = Depends(get_activation_service),
):
    """Polled by the waiting user; carries the SMS code once relayed"""
    return _status_response(service.get_request(short_id))


@router.post("/requests/{short_id}/request-sms", response_model=ActivationStatusResponse)
async def request_sms(
    short_id: str,
    _: None = Depends(rate_limit_poll),
    service: ActivationService = Depends(get_activation_service),
):
    return _status_response(await service.request_sms(short_id))


# ============================================================================
# ADMIN
# ============================================================================


@router.get("/admin/requests", response_model=list[ActivationRequestResponse])
async def list_activation_requests(
    status: Optional[str] = None,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ActivationService = Depends(get_activation_service),
):
    return [serialize_request(request) for request in service.list_requests(status)]


@router.get("/admin/phone-numbers", response_model=list[PhoneNumberResponse])
async def list_phone_numbers(
    _admin: CurrentUser = Depends(get_current_admin),
    service: ActivationService = Depends(get_activation_service),
):
    return service.list_phone_numbers()


@router.post("/admin/phone-numbers", response_model=PhoneNumberResponse, status_code=201)
async def create_phone_number(
    data: PhoneNumberCreate,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ActivationService = Depends(get_activation_service),
):
    return service.create_phone_number(data)


@router.delete("/admin/phone-numbers/{phone_number_id}")
async def delete_phone_number(
    phone_number_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ActivationService = Depends(get_activation_service),
):
    return service.delete_phone_number(phone_number_id)
