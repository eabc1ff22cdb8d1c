"""Contract repository - Database operations for intake tokens and employment contracts"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, ContractRequestToken, EmploymentContract, UserRole


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.recipient))
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def create_request_token(db: Session, **data) -> ContractRequestToken:
        request_token = ContractRequestToken(**data)
        db.add(request_token)
        db.commit()
        db.refresh(request_token)
        return request_token

    @staticmethod
    def get_request_token(db: Session, token: str) -> Optional[ContractRequestToken]:
        return db.query(ContractRequestToken).filter(ContractRequestToken.token == token).first()

    @staticmethod
    def list_request_tokens(db: Session, appointment_id: int) -> list[ContractRequestToken]:
        return (
            db.query(ContractRequestToken)
            .filter(ContractRequestToken.appointment_id == appointment_id)
            .order_by(ContractRequestToken.created_at.desc(), ContractRequestToken.id.desc())
            .all()
        )

    @staticmethod
    def list_contracts(db: Session, status: Optional[str] = None) -> list[EmploymentContract]:
        query = db.query(EmploymentContract)
        if status:
            query = query.filter(EmploymentContract.status == status)
        return query.order_by(EmploymentContract.submitted_at.desc(), EmploymentContract.id.desc()).all()

    @staticmethod
    def get_contract(db: Session, contract_id: int) -> Optional[EmploymentContract]:
        return db.query(EmploymentContract).filter(EmploymentContract.id == contract_id).first()

    @staticmethod
    def open_contract_for_appointment(db: Session, appointment_id: int) -> Optional[EmploymentContract]:
        """Pending or accepted contract already submitted for this appointment"""
        return (
            db.query(EmploymentContract)
            .filter(
                EmploymentContract.appointment_id == appointment_id,
                EmploymentContract.status != "rejected",
            )
            .first()
        )

    @staticmethod
    def create_contract(db: Session, **data) -> EmploymentContract:
        contract = EmploymentContract(**data)
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract

    @staticmethod
    def assign_role(db: Session, user_id: str, role: str) -> UserRole:
        """Add a role row unless the user already has that role; no commit"""
        existing = (
            db.query(UserRole).filter(UserRole.user_id == user_id, UserRole.role == role).first()
        )
        if existing:
            return existing
        user_role = UserRole(user_id=user_id, role=role)
        db.add(user_role)
        return user_role

    @staticmethod
    def save(db: Session, obj):
        db.commit()
        db.refresh(obj)
        return obj
