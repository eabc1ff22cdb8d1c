"""Appointment repository - Database operations for appointments and blocked times"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import (
    Appointment,
    AppointmentReminder,
    AppointmentStatusHistory,
    BlockedTime,
    Recipient,
)
from .slots import stored_time_forms
from .status import AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_recipient_by_token(db: Session, token: str) -> Optional[Recipient]:
        return db.query(Recipient).filter(Recipient.unique_token == token).first()

    @staticmethod
    def get_recipient_by_id(db: Session, recipient_id: int) -> Optional[Recipient]:
        return db.query(Recipient).filter(Recipient.id == recipient_id).first()

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.recipient))
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def list_appointments(db: Session, on_date: Optional[date] = None) -> list[Appointment]:
        """All appointments with their recipient, ordered by date then time"""
        query = db.query(Appointment).options(joinedload(Appointment.recipient))
        if on_date:
            query = query.filter(Appointment.appointment_date == on_date)
        return query.order_by(Appointment.appointment_date, Appointment.appointment_time).all()

    @staticmethod
    def appointments_between(db: Session, start: date, end: date) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.appointment_date >= start, Appointment.appointment_date <= end)
            .all()
        )

    @staticmethod
    def confirmed_on(db: Session, on_date: date) -> list[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.recipient))
            .filter(
                Appointment.appointment_date == on_date,
                Appointment.status == AppointmentStatus.CONFIRMED.value,
            )
            .order_by(Appointment.appointment_time)
            .all()
        )

    @staticmethod
    def confirmed_without_reminder(db: Session, start: date, end: date) -> list[Appointment]:
        """Confirmed appointments in [start, end] that have no reminder marker yet"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.recipient))
            .outerjoin(AppointmentReminder, AppointmentReminder.appointment_id == Appointment.id)
            .filter(
                Appointment.status == AppointmentStatus.CONFIRMED.value,
                Appointment.appointment_date >= start,
                Appointment.appointment_date <= end,
                AppointmentReminder.id.is_(None),
            )
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
            .all()
        )

    @staticmethod
    def record_reminder(db: Session, appointment_id: int) -> AppointmentReminder:
        reminder = AppointmentReminder(appointment_id=appointment_id)
        db.add(reminder)
        db.commit()
        return reminder

    @staticmethod
    def active_at_slot(
        db: Session, on_date: date, time_value: str, exclude_id: Optional[int] = None
    ) -> Optional[Appointment]:
        """Non-cancelled appointment holding (date, time), if any"""
        query = db.query(Appointment).filter(
            Appointment.appointment_date == on_date,
            Appointment.appointment_time.in_(stored_time_forms(time_value)),
            Appointment.status != AppointmentStatus.CANCELLED.value,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first()

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def add_status_history(
        db: Session, appointment_id: int, old_status: Optional[str], new_status: str
    ) -> AppointmentStatusHistory:
        entry = AppointmentStatusHistory(
            appointment_id=appointment_id, old_status=old_status, new_status=new_status
        )
        db.add(entry)
        return entry

    @staticmethod
    def get_status_history(db: Session, appointment_id: int) -> list[AppointmentStatusHistory]:
        return (
            db.query(AppointmentStatusHistory)
            .filter(AppointmentStatusHistory.appointment_id == appointment_id)
            .order_by(AppointmentStatusHistory.changed_at, AppointmentStatusHistory.id)
            .all()
        )

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    # Blocked times

    @staticmethod
    def list_blocked_times(
        db: Session, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[BlockedTime]:
        query = db.query(BlockedTime)
        if start:
            query = query.filter(BlockedTime.block_date >= start)
        if end:
            query = query.filter(BlockedTime.block_date <= end)
        return query.order_by(BlockedTime.block_date, BlockedTime.block_time).all()

    @staticmethod
    def get_blocked_time(db: Session, blocked_time_id: int) -> Optional[BlockedTime]:
        return db.query(BlockedTime).filter(BlockedTime.id == blocked_time_id).first()

    @staticmethod
    def find_blocked_time(db: Session, on_date: date, time_value: str) -> Optional[BlockedTime]:
        return (
            db.query(BlockedTime)
            .filter(
                BlockedTime.block_date == on_date,
                BlockedTime.block_time.in_(stored_time_forms(time_value)),
            )
            .first()
        )

    @staticmethod
    def create_blocked_time(db: Session, **data) -> BlockedTime:
        blocked = BlockedTime(**data)
        db.add(blocked)
        db.commit()
        db.refresh(blocked)
        return blocked

    @staticmethod
    def delete_blocked_time(db: Session, blocked: BlockedTime) -> None:
        db.delete(blocked)
        db.commit()
