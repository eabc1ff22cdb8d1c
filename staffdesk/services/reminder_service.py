"""
Reminder Service
Telegram reminders to the admin chats shortly before a confirmed appointment.
Runs from the arq cron job and from POST /reminders/check.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import REMINDER_WINDOW_MAX_MINUTES, REMINDER_WINDOW_MIN_MINUTES
from ..domain.appointments.repository import AppointmentRepository
from ..domain.appointments.slots import normalize_time
from ..utils.clock import local_now
from .telegram_service import reminder_message, send_to_admin_chats

logger = logging.getLogger(__name__)


def appointment_start(appointment) -> datetime:
    """Naive local datetime at which the appointment begins"""
    hours, minutes, seconds = (int(part) for part in normalize_time(appointment.appointment_time).split(":"))
    return datetime.combine(appointment.appointment_date, datetime.min.time()).replace(
        hour=hours, minute=minutes, second=seconds
    )


def minutes_until(start: datetime, now: datetime) -> int:
    return round((start - now).total_seconds() / 60)


def in_reminder_window(minutes: int) -> bool:
    return REMINDER_WINDOW_MIN_MINUTES <= minutes <= REMINDER_WINDOW_MAX_MINUTES


def format_appointment_label(start: datetime) -> str:
    return f"{start.strftime('%d.%m.%Y')} um {start.strftime('%H:%M')} Uhr"


async def run_reminder_check(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Send one reminder per confirmed appointment starting within the window

    An appointment is skipped once an appointment_reminders row exists for it,
    so repeated runs inside the same window notify only once.

    Returns:
        Dict with reminders_sent, total_checked and per-appointment results
    """
    now = now or local_now()
    # the window may cross midnight
    horizon = now + timedelta(minutes=REMINDER_WINDOW_MAX_MINUTES + 1)
    candidates = AppointmentRepository.confirmed_without_reminder(db, now.date(), horizon.date())

    results = []
    reminders_sent = 0

    for appointment in candidates:
        entry = {"appointment_id": appointment.id, "status": None, "minutes_until": None}
        try:
            start = appointment_start(appointment)
            minutes = minutes_until(start, now)
            entry["minutes_until"] = minutes

            if not in_reminder_window(minutes):
                entry["status"] = "not_in_window"
                results.append(entry)
                continue

            recipient = appointment.recipient
            text = reminder_message(
                first_name=recipient.first_name,
                last_name=recipient.last_name,
                email=recipient.email,
                phone_note=recipient.phone_note,
                appointment_label=format_appointment_label(start),
                minutes_until=minutes,
            )
            delivery = await send_to_admin_chats(text)

            if delivery["sent"] == 0:
                logger.error(
                    f"❌ Reminder for appointment {appointment.id} not delivered: {delivery['errors']}"
                )
                entry["status"] = "failed"
                results.append(entry)
                continue

            try:
                AppointmentRepository.record_reminder(db, appointment.id)
            except IntegrityError:
                # another run recorded it first
                db.rollback()
                logger.warning(f"⚠️ Reminder marker for appointment {appointment.id} already exists")

            reminders_sent += 1
            entry["status"] = "sent"
            logger.info(f"🔔 Reminder sent for appointment {appointment.id} ({minutes} min ahead)")
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Reminder check failed for appointment {appointment.id}: {e}")
            entry["status"] = "error"
            entry["error"] = str(e)
        results.append(entry)

    logger.info(f"✅ Reminder check done: {reminders_sent} sent, {len(candidates)} checked")
    return {"reminders_sent": reminders_sent, "total_checked": len(candidates), "results": results}
