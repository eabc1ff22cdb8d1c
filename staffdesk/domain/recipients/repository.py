"""Recipient repository - Database operations for booking invitees"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Recipient


class RecipientRepository:
    @staticmethod
    def list_recipients(db: Session) -> list[Recipient]:
        return db.query(Recipient).order_by(Recipient.created_at.desc(), Recipient.id.desc()).all()

    @staticmethod
    def get_recipient(db: Session, recipient_id: int) -> Optional[Recipient]:
        return db.query(Recipient).filter(Recipient.id == recipient_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Recipient]:
        return db.query(Recipient).filter(func.lower(Recipient.email) == email.lower()).first()

    @staticmethod
    def all_emails(db: Session) -> list[str]:
        return [row[0] for row in db.query(Recipient.email).all()]

    @staticmethod
    def create_recipient(db: Session, commit: bool = True, **data) -> Recipient:
        recipient = Recipient(**data)
        db.add(recipient)
        if commit:
            db.commit()
            db.refresh(recipient)
        return recipient

    @staticmethod
    def save(db: Session, recipient: Recipient) -> Recipient:
        db.commit()
        db.refresh(recipient)
        return recipient

    @staticmethod
    def delete_recipient(db: Session, recipient: Recipient) -> None:
        db.delete(recipient)
        db.commit()
