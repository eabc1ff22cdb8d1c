import secrets
import string

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

TOKEN_ALPHABET = string.ascii_lowercase + string.digits
SHORT_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_booking_token() -> str:
    """Generate the opaque 32-character booking token for a recipient"""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(32))


def generate_short_id() -> str:
    """Generate the short ID admins type into bot commands"""
    return "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(6))


def generate_contract_token() -> str:
    return secrets.token_urlsafe(32)


class UserRole(Base):
    """Role assignment for a user of the managed auth service"""

    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), index=True, nullable=False)  # auth service user id (uuid)
    role = Column(String(20), nullable=False, default="user")  # admin, employee, user
    created_at = Column(DateTime, server_default=func.now())


class Recipient(Base):
    """A person invited to book an appointment via their token link"""

    __tablename__ = "appointment_recipients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    unique_token = Column(
        String(64), unique=True, index=True, nullable=False, default=generate_booking_token
    )
    email_sent = Column(Boolean, default=False, nullable=False)  # Invitation e-mail delivered
    phone_note = Column(Text, nullable=True)  # Free-text phone number / note
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship(
        "Appointment", back_populates="recipient", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one non-cancelled appointment per slot
        Index(
            "uq_appointments_active_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(
        Integer, ForeignKey("appointment_recipients.id", ondelete="CASCADE"), nullable=False
    )
    appointment_date = Column(Date, index=True, nullable=False)
    appointment_time = Column(String(8), nullable=False)  # HH:MM:SS
    status = Column(String(30), default="pending", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    confirmed_at = Column(DateTime, nullable=True)

    recipient = relationship("Recipient", back_populates="appointments")
    reminder = relationship(
        "AppointmentReminder",
        back_populates="appointment",
        uselist=False,
        cascade="all, delete-orphan",
    )
    status_history = relationship(
        "AppointmentStatusHistory",
        back_populates="appointment",
        cascade="all, delete-orphan",
        order_by="AppointmentStatusHistory.changed_at",
    )


class AppointmentReminder(Base):
    """Marker that the pre-appointment reminder went out"""

    __tablename__ = "appointment_reminders"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(
        Integer, ForeignKey("appointments.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    reminder_sent_at = Column(DateTime, server_default=func.now())

    appointment = relationship("Appointment", back_populates="reminder")


class AppointmentStatusHistory(Base):
    __tablename__ = "appointment_status_history"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(
        Integer, ForeignKey("appointments.id", ondelete="CASCADE"), index=True, nullable=False
    )
    old_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=False)
    changed_at = Column(DateTime, server_default=func.now())

    appointment = relationship("Appointment", back_populates="status_history")


class BlockedTime(Base):
    """Administrator closure of a single slot (holiday, lunch block)"""

    __tablename__ = "blocked_times"

    id = Column(Integer, primary_key=True, index=True)
    block_date = Column(Date, index=True, nullable=False)
    block_time = Column(String(8), nullable=False)  # HH:MM:SS
    reason = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class PhoneNumber(Base):
    """Phone number offered for SMS activation, unlocked by its access code"""

    __tablename__ = "phone_numbers"

    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String(50), unique=True, index=True, nullable=False)
    access_code = Column(String(50), nullable=False)  # PIN handed to the user
    is_used = Column(Boolean, default=False, nullable=False)
    used_at = Column(DateTime, nullable=True)
    source_url = Column(String(500), nullable=True)
    source_domain = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    requests = relationship(
        "ActivationRequest", back_populates="phone_number", cascade="all, delete-orphan"
    )


class ActivationRequest(Base):
    """SMS activation request: pending -> activated -> sms_requested -> completed"""

    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)
    phone_number_id = Column(
        Integer, ForeignKey("phone_numbers.id", ondelete="CASCADE"), nullable=False
    )
    short_id = Column(String(12), unique=True, index=True, nullable=False, default=generate_short_id)
    status = Column(String(20), default="pending", nullable=False)
    sms_code = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    phone_number = relationship("PhoneNumber", back_populates="requests")


class ContractRequestToken(Base):
    """Single-use link sent after an appointment to collect contract data"""

    __tablename__ = "contract_request_tokens"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(
        Integer, ForeignKey("appointments.id", ondelete="CASCADE"), index=True, nullable=False
    )
    token = Column(String(128), unique=True, index=True, nullable=False, default=generate_contract_token)
    email_sent = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    appointment = relationship("Appointment")


class EmploymentContract(Base):
    __tablename__ = "employment_contracts"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(
        Integer, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True
    )
    # Personal data
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    marital_status = Column(String(50), nullable=True)
    start_date = Column(Date, nullable=False)  # Desired, then confirmed on acceptance
    # Tax and insurance
    tax_number = Column(String(50), nullable=False)
    social_security_number = Column(String(50), nullable=False)
    health_insurance_name = Column(String(255), nullable=False)
    # Banking
    iban = Column(String(50), nullable=False)
    bic = Column(String(20), nullable=True)
    bank_name = Column(String(255), nullable=True)
    # R2 keys for uploaded ID card images
    id_card_front_key = Column(String(500), nullable=True)
    id_card_back_key = Column(String(500), nullable=True)

    status = Column(String(20), default="pending", nullable=False)  # pending, accepted, rejected
    submitted_at = Column(DateTime, server_default=func.now())
    accepted_at = Column(DateTime, nullable=True)
    # Account provisioning
    account_created = Column(Boolean, default=False, nullable=False)
    account_created_at = Column(DateTime, nullable=True)
    user_id = Column(String(64), nullable=True)  # auth service user id
    created_at = Column(DateTime, server_default=func.now())

    appointment = relationship("Appointment")
