"""Appointment status allow-list"""

from enum import Enum


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    INTERESSIERT = "interessiert"  # interested
    ABGELEHNT = "abgelehnt"  # rejected
    MAILBOX = "mailbox"
    INFOS_ANGEFRAGT = "infos_angefragt"  # info requested


ALLOWED_STATUSES = [status.value for status in AppointmentStatus]


class InvalidStatusError(ValueError):
    """Raised for a status string outside ALLOWED_STATUSES"""

    def __init__(self, value):
        self.invalid_status = value
        self.allowed_statuses = list(ALLOWED_STATUSES)
        super().__init__(
            f"Invalid status {value!r}. Allowed: {', '.join(self.allowed_statuses)}"
        )

    def to_detail(self) -> dict:
        return {
            "message": "Ungültiger Status",
            "invalid_status": self.invalid_status,
            "allowed_statuses": self.allowed_statuses,
        }


def validate_status(value) -> AppointmentStatus:
    """
    Return the AppointmentStatus for ``value``.

    Any allowed status may follow any other; there is no transition graph.

    Raises:
        InvalidStatusError: If value is not one of ALLOWED_STATUSES
    """
    if isinstance(value, AppointmentStatus):
        return value
    if not isinstance(value, str) or value not in ALLOWED_STATUSES:
        raise InvalidStatusError(value)
    return AppointmentStatus(value)
