"""Activation repository - phone numbers and SMS activation requests"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ActivationRequest, PhoneNumber


class ActivationRepository:
    @staticmethod
    def list_phone_numbers(db: Session) -> list[PhoneNumber]:
        return db.query(PhoneNumber).order_by(PhoneNumber.created_at.desc(), PhoneNumber.id.desc()).all()

    @staticmethod
    def get_phone_number(db: Session, phone_number_id: int) -> Optional[PhoneNumber]:
        return db.query(PhoneNumber).filter(PhoneNumber.id == phone_number_id).first()

    @staticmethod
    def get_phone_by_value(db: Session, phone: str) -> Optional[PhoneNumber]:
        return db.query(PhoneNumber).filter(PhoneNumber.phone == phone).first()

    @staticmethod
    def create_phone_number(db: Session, **data) -> PhoneNumber:
        phone_number = PhoneNumber(**data)
        db.add(phone_number)
        db.commit()
        db.refresh(phone_number)
        return phone_number

    @staticmethod
    def delete_phone_number(db: Session, phone_number: PhoneNumber) -> None:
        db.delete(phone_number)
        db.commit()

    @staticmethod
    def list_requests(db: Session, status: Optional[str] = None) -> list[ActivationRequest]:
        query = db.query(ActivationRequest).options(joinedload(ActivationRequest.phone_number))
        if status:
            query = query.filter(ActivationRequest.status == status)
        return query.order_by(ActivationRequest.created_at.desc(), ActivationRequest.id.desc()).all()

    @staticmethod
    def get_request_by_short_id(db: Session, short_id: str) -> Optional[ActivationRequest]:
        return (
            db.query(ActivationRequest)
            .options(joinedload(ActivationRequest.phone_number))
            .filter(ActivationRequest.short_id == short_id.upper())
            .first()
        )

    @staticmethod
    def latest_request_for_phone(
        db: Session, phone_number_id: int, statuses: Optional[list[str]] = None
    ) -> Optional[ActivationRequest]:
        query = db.query(ActivationRequest).filter(ActivationRequest.phone_number_id == phone_number_id)
        if statuses:
            query = query.filter(ActivationRequest.status.in_(statuses))
        return query.order_by(ActivationRequest.created_at.desc(), ActivationRequest.id.desc()).first()

    @staticmethod
    def short_id_exists(db: Session, short_id: str) -> bool:
        return db.query(ActivationRequest.id).filter(ActivationRequest.short_id == short_id).first() is not None

    @staticmethod
    def create_request(db: Session, **data) -> ActivationRequest:
        request = ActivationRequest(**data)
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def save(db: Session, obj):
        db.commit()
        db.refresh(obj)
        return obj
