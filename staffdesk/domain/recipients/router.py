"""Recipient router - admin endpoints for booking invitees"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_admin
from ...database import get_db
from .schemas import (
    PhoneNoteUpdate,
    RecipientCreate,
    RecipientImportRequest,
    RecipientImportResult,
    RecipientResponse,
)
from .service import RecipientService

router = APIRouter(prefix="/recipients", tags=["Recipients"])


def get_recipient_service(db: Session = Depends(get_db)) -> RecipientService:
    """Dependency injection for RecipientService"""
    return RecipientService(db)


@router.get("", response_model=list[RecipientResponse])
async def list_recipients(
    _admin: CurrentUser = Depends(get_current_admin),
    service: RecipientService = Depends(get_recipient_service),
):
    return service.list_recipients()


@router.post("", response_model=RecipientResponse, status_code=201)
async def create_recipient(
    data: RecipientCreate,
    _admin: CurrentUser = Depends(get_current_admin),
    service: RecipientService = Depends(get_recipient_service),
):
    return service.create_recipient(data)


@router.post("/import", response_model=RecipientImportResult)
async def import_recipients(
    data: RecipientImportRequest,
    _admin: CurrentUser = Depends(get_current_admin),
    service: RecipientService = Depends(get_recipient_service),
):
    """Bulk import, one ``Vorname:Nachname:Email`` per line"""
    return service.import_recipients(data.content)


@router.patch("/{recipient_id}/phone-note", response_model=RecipientResponse)
async def update_phone_note(
    recipient_id: int,
    data: PhoneNoteUpdate,
    _admin: CurrentUser = Depends(get_current_admin),
    service: RecipientService = Depends(get_recipient_service),
):
    return service.update_phone_note(recipient_id, data.phone_note)


@router.post("/{recipient_id}/send-invitation", response_model=RecipientResponse)
async def send_invitation(
    recipient_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: RecipientService = Depends(get_recipient_service),
):
    return await service.send_invitation(recipient_id)


@router.delete("/{recipient_id}")
async def delete_recipient(
    recipient_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: RecipientService = Depends(get_recipient_service),
):
    return service.delete_recipient(recipient_id)
