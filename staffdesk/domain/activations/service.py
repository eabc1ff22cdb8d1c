"""
Activation service - SMS activation requests

A user unlocks a phone number with its PIN (pending), an admin activates it
via the bot (activated), the user asks for an SMS (sms_requested), the admin
relays the received code and finally completes the request.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import ActivationRequest, PhoneNumber, generate_short_id
from ...services.notification_service import notify_new_activation_request, notify_sms_requested
from ...utils.sanitization import clean_text
from .repository import ActivationRepository
from .schemas import PhoneNumberCreate, RequestStatus

logger = logging.getLogger(__name__)

OPEN_STATUSES = [
    RequestStatus.PENDING.value,
    RequestStatus.ACTIVATED.value,
    RequestStatus.SMS_REQUESTED.value,
]


def serialize_request(request: ActivationRequest) -> dict:
    return {
        "id": request.id,
        "short_id": request.short_id,
        "status": request.status,
        "sms_code": request.sms_code,
        "phone_number_id": request.phone_number_id,
        "phone": request.phone_number.phone if request.phone_number else None,
        "created_at": request.created_at,
        "updated_at": request.updated_at,
    }


class ActivationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ActivationRepository()

    # ------------------------------------------------------------------
    # Phone numbers (admin)
    # ------------------------------------------------------------------

    def list_phone_numbers(self) -> list[PhoneNumber]:
        return self.repo.list_phone_numbers(self.db)

    def create_phone_number(self, data: PhoneNumberCreate) -> PhoneNumber:
        phone = data.phone.strip()
        if self.repo.get_phone_by_value(self.db, phone):
            raise HTTPException(status_code=409, detail="Telefonnummer bereits vorhanden")
        try:
            phone_number = self.repo.create_phone_number(
                self.db,
                phone=phone,
                access_code=data.access_code.strip(),
                source_url=clean_text(data.source_url),
                source_domain=clean_text(data.source_domain, max_length=255),
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        logger.info(f"✅ Phone number {phone_number.id} added")
        return phone_number

    def delete_phone_number(self, phone_number_id: int) -> dict:
        phone_number = self.repo.get_phone_number(self.db, phone_number_id)
        if not phone_number:
            raise HTTPException(status_code=404, detail="Telefonnummer nicht gefunden")
        self.repo.delete_phone_number(self.db, phone_number)
        return {"message": "Telefonnummer gelöscht"}

    def list_requests(self, status: Optional[str] = None) -> list[ActivationRequest]:
        return self.repo.list_requests(self.db, status)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_request(self, short_id: str) -> ActivationRequest:
        request = self.repo.get_request_by_short_id(self.db, short_id or "")
        if not request:
            raise HTTPException(status_code=404, detail=f"Anfrage {short_id} nicht gefunden")
        return request

    def find_for_command(self, reference: str) -> ActivationRequest:
        """Resolve a bot argument: short ID first, then the phone number's newest request"""
        request = self.repo.get_request_by_short_id(self.db, reference)
        if request:
            return request
        phone_number = self.repo.get_phone_by_value(self.db, reference)
        if phone_number:
            request = self.repo.latest_request_for_phone(self.db, phone_number.id)
            if request:
                return request
        raise HTTPException(status_code=404, detail=f"Anfrage {reference} nicht gefunden")

    def _new_short_id(self) -> str:
        for _ in range(10):
            short_id = generate_short_id()
            if not self.repo.short_id_exists(self.db, short_id):
                return short_id
        raise HTTPException(status_code=500, detail="Konnte keine Anfrage-ID erzeugen")

    # ------------------------------------------------------------------
    # Public flow
    # ------------------------------------------------------------------

    async def submit_request(self, phone: str, access_code: str) -> ActivationRequest:
        """Unlock a phone number with its PIN; reuses an open request for the same number"""
        phone_number = self.repo.get_phone_by_value(self.db, (phone or "").strip())
        if (
            not phone_number
            or phone_number.is_used
            or phone_number.access_code != (access_code or "").strip()
        ):
            logger.warning("⚠️ Activation attempt with unknown phone number or wrong PIN")
            raise HTTPException(status_code=404, detail="Ungültige Telefonnummer oder PIN")

        existing = self.repo.latest_request_for_phone(self.db, phone_number.id, OPEN_STATUSES)
        if existing:
            return existing

        try:
            request = self.repo.create_request(
                self.db,
                phone_number_id=phone_number.id,
                short_id=self._new_short_id(),
                status=RequestStatus.PENDING.value,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Anfrage konnte nicht erstellt werden") from e

        logger.info(f"📱 Activation request {request.short_id} created")
        await notify_new_activation_request(
            phone=phone_number.phone,
            access_code=phone_number.access_code,
            short_id=request.short_id,
        )
        return request

    async def request_sms(self, short_id: str) -> ActivationRequest:
        request = self.get_request(short_id)
        if request.status == RequestStatus.SMS_REQUESTED.value:
            return request
        if request.status != RequestStatus.ACTIVATED.value:
            raise HTTPException(
                status_code=409, detail="Die Nummer wurde noch nicht aktiviert"
            )

        request.status = RequestStatus.SMS_REQUESTED.value
        request = self.repo.save(self.db, request)
        logger.info(f"📨 SMS requested for {request.short_id}")
        await notify_sms_requested(phone=request.phone_number.phone, short_id=request.short_id)
        return request

    # ------------------------------------------------------------------
    # Admin transitions (bot commands)
    # ------------------------------------------------------------------

    def activate(self, reference: str) -> ActivationRequest:
        request = self.find_for_command(reference)
        if request.status != RequestStatus.PENDING.value:
            raise HTTPException(
                status_code=409,
                detail=f"Anfrage {request.short_id} ist nicht offen (Status: {request.status})",
            )
        request.status = RequestStatus.ACTIVATED.value
        request = self.repo.save(self.db, request)
        logger.info(f"✅ Activation request {request.short_id} activated")
        return request

    def store_code(self, reference: str, code: str) -> ActivationRequest:
        """Relay an SMS code to the user; allowed once the number is activated"""
        request = self.find_for_command(reference)
        if request.status not in (RequestStatus.ACTIVATED.value, RequestStatus.SMS_REQUESTED.value):
            raise HTTPException(
                status_code=409,
                detail=f"Anfrage {request.short_id} erwartet keinen Code (Status: {request.status})",
            )
        request.sms_code = code.strip()
        request.status = RequestStatus.SMS_REQUESTED.value
        request = self.repo.save(self.db, request)
        logger.info(f"🔑 SMS code stored for {request.short_id}")
        return request

    def complete(self, reference: str) -> ActivationRequest:
        request = self.find_for_command(reference)
        if request.status == RequestStatus.COMPLETED.value:
            raise HTTPException(
                status_code=409, detail=f"Anfrage {request.short_id} ist bereits abgeschlossen"
            )
        request.status = RequestStatus.COMPLETED.value
        request.phone_number.is_used = True
        request.phone_number.used_at = datetime.utcnow()
        request = self.repo.save(self.db, request)
        logger.info(f"🏁 Activation request {request.short_id} completed")
        return request
