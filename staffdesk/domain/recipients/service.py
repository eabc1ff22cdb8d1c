"""Recipient service - invitees, bulk import and invitation e-mails"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...email_service import send_appointment_invitation
from ...models import Recipient
from ...realtime import ChangeFeed, change_feed
from ...shared.validators import validate_email
from ...utils.sanitization import clean_text
from .parsing import ImportLineError, parse_recipient_lines
from .repository import RecipientRepository
from .schemas import RecipientCreate, RecipientResponse

logger = logging.getLogger(__name__)


def serialize_recipient(recipient: Recipient) -> dict:
    return RecipientResponse.model_validate(recipient).model_dump(mode="json")


class RecipientService:
    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.repo = RecipientRepository()
        self.feed = feed or change_feed

    def list_recipients(self) -> list[Recipient]:
        return self.repo.list_recipients(self.db)

    def get_recipient(self, recipient_id: int) -> Recipient:
        recipient = self.repo.get_recipient(self.db, recipient_id)
        if not recipient:
            raise HTTPException(status_code=404, detail="Empfänger nicht gefunden")
        return recipient

    def create_recipient(self, data: RecipientCreate) -> Recipient:
        try:
            email = validate_email(data.email)
            phone_note = clean_text(data.phone_note)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        first_name = data.first_name.strip()
        last_name = data.last_name.strip()
        if not first_name or not last_name:
            raise HTTPException(
                status_code=400, detail="Alle Felder sind erforderlich (Vorname, Nachname, Email)"
            )

        if self.repo.get_by_email(self.db, email):
            raise HTTPException(status_code=409, detail="E-Mail-Adresse bereits vorhanden")

        recipient = self.repo.create_recipient(
            self.db,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_note=phone_note,
        )
        logger.info(f"✅ Recipient {recipient.id} created")
        self.feed.publish("appointment_recipients", "INSERT", serialize_recipient(recipient))
        return recipient

    def update_phone_note(self, recipient_id: int, phone_note: Optional[str]) -> Recipient:
        recipient = self.get_recipient(recipient_id)
        try:
            recipient.phone_note = clean_text(phone_note)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        recipient = self.repo.save(self.db, recipient)
        self.feed.publish("appointment_recipients", "UPDATE", serialize_recipient(recipient))
        return recipient

    def delete_recipient(self, recipient_id: int) -> dict:
        """Delete a recipient together with their appointments"""
        recipient = self.get_recipient(recipient_id)
        appointment_ids = [appointment.id for appointment in recipient.appointments]
        self.repo.delete_recipient(self.db, recipient)

        for appointment_id in appointment_ids:
            self.feed.publish("appointments", "DELETE", {"id": appointment_id})
        self.feed.publish("appointment_recipients", "DELETE", {"id": recipient_id})
        logger.info(f"🗑️ Recipient {recipient_id} deleted with {len(appointment_ids)} appointments")
        return {"message": "Empfänger gelöscht"}

    def import_recipients(self, content: str) -> dict:
        """
        Import ``Vorname:Nachname:Email`` lines. Bad lines are reported,
        never abort the import.
        """
        parsed = parse_recipient_lines(content, self.repo.all_emails(self.db))
        errors = list(parsed.errors)
        success = 0

        for candidate in parsed.candidates:
            try:
                recipient = self.repo.create_recipient(
                    self.db,
                    first_name=candidate.first_name,
                    last_name=candidate.last_name,
                    email=candidate.email.lower(),
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Import line {candidate.line} failed: {e}")
                errors.append(
                    ImportLineError(candidate.line, candidate.content, f"Datenbankfehler: {e}")
                )
                continue
            success += 1
            self.feed.publish("appointment_recipients", "INSERT", serialize_recipient(recipient))

        errors.sort(key=lambda error: error.line)
        logger.info(
            f"📥 Recipient import: {success} imported, {parsed.duplicates} duplicates, "
            f"{len(errors)} errors"
        )
        return {
            "success": success,
            "duplicates": parsed.duplicates,
            "errors": [
                {"line": error.line, "content": error.content, "error": error.error}
                for error in errors
            ],
        }

    async def send_invitation(self, recipient_id: int) -> Recipient:
        """E-mail the booking link; email_sent only flips on success"""
        recipient = self.get_recipient(recipient_id)
        try:
            await send_appointment_invitation(
                to=recipient.email,
                first_name=recipient.first_name,
                last_name=recipient.last_name,
                token=recipient.unique_token,
            )
        except Exception as e:
            logger.error(f"❌ Invitation e-mail failed for recipient {recipient.id}: {e}")
            raise HTTPException(
                status_code=502, detail="E-Mail konnte nicht gesendet werden"
            ) from e

        recipient.email_sent = True
        recipient = self.repo.save(self.db, recipient)
        logger.info(f"📧 Invitation sent to recipient {recipient.id}")
        self.feed.publish("appointment_recipients", "UPDATE", serialize_recipient(recipient))
        return recipient
