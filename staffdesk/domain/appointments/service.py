"""Appointment service - slot rules, booking workflow and status changes"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...email_service import send_missed_appointment_email
from ...models import Appointment, BlockedTime, Recipient
from ...realtime import ChangeFeed, change_feed
from ...services.notification_service import notify_appointment_confirmed
from ...utils.clock import local_now
from ...utils.sanitization import clean_text
from .availability import available_slots, bookable_dates, is_date_fully_booked, upcoming_weekdays
from .repository import AppointmentRepository
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    BlockedTimeCreate,
    BlockedTimeResponse,
    BookingRequest,
)
from .slots import is_catalog_slot, normalize_time
from .status import AppointmentStatus, InvalidStatusError, validate_status

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Dieser Termin ist leider nicht mehr verfügbar. Bitte wählen Sie eine andere Uhrzeit."


def serialize_appointment(appointment: Appointment) -> dict:
    return AppointmentResponse.model_validate(appointment).model_dump(mode="json")


def serialize_blocked_time(blocked: BlockedTime) -> dict:
    return BlockedTimeResponse.model_validate(blocked).model_dump(mode="json")


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.repo = AppointmentRepository()
        self.feed = feed or change_feed

    # ------------------------------------------------------------------
    # Slot rules
    # ------------------------------------------------------------------

    def _slot_time(self, value: Optional[str]) -> str:
        """Normalize a requested time and require it to be a catalog slot"""
        if not value or not is_catalog_slot(value):
            raise HTTPException(status_code=400, detail=f"Ungültige Uhrzeit: {value}")
        return normalize_time(value)

    def _ensure_slot_free(
        self, on_date: date, time_value: str, exclude_id: Optional[int] = None
    ) -> None:
        if self.repo.find_blocked_time(self.db, on_date, time_value):
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)
        if self.repo.active_at_slot(self.db, on_date, time_value, exclude_id=exclude_id):
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

    def slots_for(self, on_date: date, now: Optional[datetime] = None) -> list[str]:
        appointments = self.repo.appointments_between(self.db, on_date, on_date)
        blocked = self.repo.list_blocked_times(self.db, on_date, on_date)
        return available_slots(on_date, appointments, blocked, now)

    def _insert(self, **appointment_data) -> Appointment:
        try:
            appointment = self.repo.create_appointment(self.db, **appointment_data)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"⚠️ Slot {appointment_data.get('appointment_date')} "
                f"{appointment_data.get('appointment_time')} taken concurrently"
            )
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE) from e
        self.feed.publish("appointments", "INSERT", serialize_appointment(appointment))
        return appointment

    # ------------------------------------------------------------------
    # Admin appointment management
    # ------------------------------------------------------------------

    def list_appointments(self, on_date: Optional[date] = None) -> list[Appointment]:
        return self.repo.list_appointments(self.db, on_date)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Termin nicht gefunden")
        return appointment

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """Admin-created appointment with any allowed status"""
        try:
            status = validate_status(data.status)
        except InvalidStatusError as e:
            raise HTTPException(status_code=400, detail=e.to_detail()) from e

        if not self.repo.get_recipient_by_id(self.db, data.recipient_id):
            raise HTTPException(status_code=404, detail="Empfänger nicht gefunden")

        time_value = self._slot_time(data.appointment_time)
        if status != AppointmentStatus.CANCELLED:
            self._ensure_slot_free(data.appointment_date, time_value)

        appointment = self._insert(
            recipient_id=data.recipient_id,
            appointment_date=data.appointment_date,
            appointment_time=time_value,
            status=status.value,
            confirmed_at=datetime.utcnow() if status == AppointmentStatus.CONFIRMED else None,
        )
        logger.info(f"📅 Admin created appointment {appointment.id} ({status.value})")
        return appointment

    def update_status(self, appointment_id: int, new_status) -> Appointment:
        """
        Apply an allowed status; any status may follow any other.
        Invalid values are rejected before the database is touched.
        """
        try:
            status = validate_status(new_status)
        except InvalidStatusError as e:
            logger.warning(f"⚠️ Rejected status {e.invalid_status!r} for appointment {appointment_id}")
            raise HTTPException(status_code=400, detail=e.to_detail()) from e

        appointment = self.get_appointment(appointment_id)
        old_status = appointment.status

        # Reviving a cancelled appointment fails only if another one holds the slot;
        # blocked times do not stop a status change
        if old_status == AppointmentStatus.CANCELLED.value and status != AppointmentStatus.CANCELLED:
            if self.repo.active_at_slot(
                self.db,
                appointment.appointment_date,
                appointment.appointment_time,
                exclude_id=appointment.id,
            ):
                raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

        appointment.status = status.value
        if status == AppointmentStatus.CONFIRMED:
            appointment.confirmed_at = datetime.utcnow()
        self.repo.add_status_history(self.db, appointment.id, old_status, status.value)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE) from e
        self.db.refresh(appointment)

        logger.info(f"✅ Appointment {appointment.id} status {old_status} -> {status.value}")
        self.feed.publish("appointments", "UPDATE", serialize_appointment(appointment))
        return appointment

    def get_status_history(self, appointment_id: int):
        self.get_appointment(appointment_id)
        return self.repo.get_status_history(self.db, appointment_id)

    def delete_appointment(self, appointment_id: int) -> dict:
        appointment = self.get_appointment(appointment_id)
        self.repo.delete_appointment(self.db, appointment)
        self.feed.publish("appointments", "DELETE", {"id": appointment_id})
        return {"message": "Termin gelöscht"}

    async def send_missed_email(self, appointment_id: int) -> dict:
        """Re-booking e-mail for a no-show; provider failures surface as 502"""
        appointment = self.get_appointment(appointment_id)
        recipient = appointment.recipient
        try:
            await send_missed_appointment_email(
                to=recipient.email,
                first_name=recipient.first_name,
                last_name=recipient.last_name,
                appointment_date=appointment.appointment_date,
                appointment_time=appointment.appointment_time,
                token=recipient.unique_token,
            )
        except Exception as e:
            logger.error(f"❌ Missed appointment e-mail failed for {appointment.id}: {e}")
            raise HTTPException(
                status_code=502, detail="E-Mail konnte nicht gesendet werden"
            ) from e
        return {"message": "E-Mail gesendet", "email": recipient.email}

    # ------------------------------------------------------------------
    # Blocked times
    # ------------------------------------------------------------------

    def list_blocked_times(self, start: Optional[date] = None, end: Optional[date] = None):
        return self.repo.list_blocked_times(self.db, start, end)

    def create_blocked_time(self, data: BlockedTimeCreate) -> BlockedTime:
        time_value = self._slot_time(data.block_time)
        if self.repo.find_blocked_time(self.db, data.block_date, time_value):
            raise HTTPException(status_code=409, detail="Zeit ist bereits blockiert")

        try:
            reason = clean_text(data.reason, max_length=255)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        blocked = self.repo.create_blocked_time(
            self.db, block_date=data.block_date, block_time=time_value, reason=reason
        )
        logger.info(f"🚫 Blocked {blocked.block_date} {blocked.block_time}")
        self.feed.publish("blocked_times", "INSERT", serialize_blocked_time(blocked))
        return blocked

    def delete_blocked_time(self, blocked_time_id: int) -> dict:
        blocked = self.repo.get_blocked_time(self.db, blocked_time_id)
        if not blocked:
            raise HTTPException(status_code=404, detail="Blockierte Zeit nicht gefunden")
        self.repo.delete_blocked_time(self.db, blocked)
        self.feed.publish("blocked_times", "DELETE", {"id": blocked_time_id})
        return {"message": "Blockierung entfernt"}

    # ------------------------------------------------------------------
    # Public booking workflow
    # ------------------------------------------------------------------

    def get_recipient_for_token(self, token: str) -> Recipient:
        recipient = self.repo.get_recipient_by_token(self.db, token)
        if not recipient:
            logger.warning("⚠️ Booking attempted with unknown token")
            raise HTTPException(
                status_code=404,
                detail="Ungültiger Buchungslink",
                headers={"X-Redirect-To": "/"},
            )
        return recipient

    def get_booking_page(self, token: str) -> dict:
        recipient = self.get_recipient_for_token(token)
        now = local_now()
        horizon = upcoming_weekdays(now.date())
        appointments = self.repo.appointments_between(self.db, horizon[0], horizon[-1])
        blocked = self.repo.list_blocked_times(self.db, horizon[0], horizon[-1])
        return {
            "first_name": recipient.first_name,
            "last_name": recipient.last_name,
            "available_dates": bookable_dates(appointments, blocked, now),
        }

    def get_booking_slots(self, token: str, on_date: date) -> dict:
        self.get_recipient_for_token(token)
        appointments = self.repo.appointments_between(self.db, on_date, on_date)
        blocked = self.repo.list_blocked_times(self.db, on_date, on_date)
        now = local_now()
        in_horizon = on_date in upcoming_weekdays(now.date())
        return {
            "appointment_date": on_date,
            "slots": available_slots(on_date, appointments, blocked, now) if in_horizon else [],
            "fully_booked": is_date_fully_booked(on_date, appointments, blocked),
        }

    async def book(self, token: str, data: BookingRequest) -> dict:
        """
        Book a slot for the token's recipient. The appointment is always
        confirmed; the confirmation e-mail is best-effort.
        """
        recipient = self.get_recipient_for_token(token)

        if not data.appointment_date or not data.appointment_time:
            raise HTTPException(status_code=400, detail="Bitte wählen Sie Datum und Uhrzeit aus")

        time_value = self._slot_time(data.appointment_time)
        now = local_now()
        if data.appointment_date not in upcoming_weekdays(now.date()):
            raise HTTPException(status_code=400, detail="Dieses Datum kann nicht gebucht werden")

        # Fresh read right before the insert; the unique index catches the rest
        if time_value[:5] not in self.slots_for(data.appointment_date, now):
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

        appointment = self._insert(
            recipient_id=recipient.id,
            appointment_date=data.appointment_date,
            appointment_time=time_value,
            status=AppointmentStatus.CONFIRMED.value,
            confirmed_at=datetime.utcnow(),
        )
        logger.info(
            f"📅 Booking confirmed for recipient {recipient.id}: "
            f"{appointment.appointment_date} {appointment.appointment_time}"
        )

        notification = await notify_appointment_confirmed(
            email=recipient.email,
            first_name=recipient.first_name,
            last_name=recipient.last_name,
            appointment_date=appointment.appointment_date,
            appointment_time=appointment.appointment_time,
        )

        message = "Termin erfolgreich gebucht"
        if not notification["sent"]:
            message += " - Die Bestätigungs-E-Mail konnte nicht gesendet werden"

        return {
            "appointment": appointment,
            "notification_sent": notification["sent"],
            "message": message,
        }
