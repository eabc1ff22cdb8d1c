"""
Admin Telegram bot commands

    /activate <ID>          pending -> activated
    /send <ID> <CODE>       relay the received SMS code to the user
    /complete <ID>          close the request and retire the phone number
    /termine                today's confirmed appointments
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..domain.activations.service import ActivationService
from ..domain.appointments.repository import AppointmentRepository
from ..utils.clock import local_now
from .telegram_service import is_authorized_chat, send_telegram_message

logger = logging.getLogger(__name__)

COMMAND_USAGE = {
    "activate": "/activate <ID> - Nummer aktivieren",
    "send": "/send <ID> <CODE> - SMS-Code übermitteln",
    "complete": "/complete <ID> - Anfrage abschließen",
    "termine": "/termine - Heutige Termine anzeigen",
}
REQUIRED_ARGS = {"activate": 1, "send": 2, "complete": 1, "termine": 0}


@dataclass
class BotCommand:
    name: str
    args: list[str] = field(default_factory=list)
    raw: str = ""


@dataclass
class BotReply:
    text: str
    parse_mode: Optional[str] = None


def parse_command(text: Optional[str]) -> Optional[BotCommand]:
    """Split '/name@bot arg1 arg2' into a command; None for plain text"""
    raw = (text or "").strip()
    if not raw.startswith("/"):
        return None
    head, *args = raw.split()
    name = head[1:].split("@", 1)[0].lower()
    return BotCommand(name=name, args=args, raw=raw)


def help_text(unknown: Optional[str] = None) -> str:
    lines = []
    if unknown:
        lines.append(f"❓ Unbekannter Befehl: {unknown}\n")
    lines.append("Verfügbare Befehle:")
    lines.extend(COMMAND_USAGE.values())
    return "\n".join(lines)


def _fit(value: str, width: int) -> str:
    if len(value) > width:
        return value[: width - 3] + "..."
    return value.ljust(width)


def format_appointments_table(rows: list[tuple[str, str, Optional[str]]], today: date) -> str:
    """Fixed-width table of (time, name, phone) rows for a Markdown code block"""
    text = f"📅 *Termine für heute ({today.strftime('%d.%m.%Y')})*\n\n"
    if not rows:
        return text + "🎉 Keine Termine für heute geplant!"

    text += "```\n"
    text += "┌──────────┬─────────────────────┬──────────────────┐\n"
    text += "│   Zeit   │        Name         │     Telefon      │\n"
    text += "├──────────┼─────────────────────┼──────────────────┤\n"
    for time_value, name, phone in rows:
        text += f"│ {time_value[:5].ljust(8)} │ {_fit(name, 19)} │ {_fit(phone or 'Nicht verfügbar', 16)} │\n"
    text += "└──────────┴─────────────────────┴──────────────────┘\n"
    text += "```\n\n"
    text += f"📊 *Gesamt: {len(rows)} Termine*"
    return text


def todays_appointments_reply(db: Session, now: Optional[datetime] = None) -> BotReply:
    today = (now or local_now()).date()
    appointments = AppointmentRepository.confirmed_on(db, today)
    rows = [
        (
            appointment.appointment_time,
            f"{appointment.recipient.first_name} {appointment.recipient.last_name}",
            appointment.recipient.phone_note,
        )
        for appointment in appointments
    ]
    return BotReply(format_appointments_table(rows, today), parse_mode="Markdown")


def execute_command(db: Session, command: BotCommand, now: Optional[datetime] = None) -> BotReply:
    """Run a parsed command and build the reply; state errors become reply text"""
    if command.name not in COMMAND_USAGE:
        return BotReply(help_text(unknown=command.raw))

    if len(command.args) < REQUIRED_ARGS[command.name]:
        return BotReply(f"⚠️ Verwendung: {COMMAND_USAGE[command.name]}")

    if command.name == "termine":
        return todays_appointments_reply(db, now)

    service = ActivationService(db)
    reference = command.args[0]
    try:
        if command.name == "activate":
            request = service.activate(reference)
            return BotReply(
                f"✅ Nummer {request.phone_number.phone} ({request.short_id}) wurde erfolgreich aktiviert!"
            )
        if command.name == "send":
            code = " ".join(command.args[1:])
            request = service.store_code(reference, code)
            return BotReply(f"✅ Code {request.sms_code} für Anfrage {request.short_id} übermittelt.")
        request = service.complete(reference)
        return BotReply(f"🏁 Anfrage {request.short_id} abgeschlossen, Nummer als benutzt markiert.")
    except HTTPException as e:
        logger.warning(f"⚠️ Bot command {command.name} failed: {e.detail}")
        return BotReply(f"❌ {e.detail}")


async def process_update(db: Session, update: dict, now: Optional[datetime] = None) -> dict:
    """
    Handle one webhook update. Messages from chats outside the admin set
    and plain text are ignored.
    """
    message = update.get("message") or {}
    text = message.get("text")
    chat_id = (message.get("chat") or {}).get("id")

    if not text or chat_id is None:
        return {"handled": False, "reason": "no_text"}

    if not is_authorized_chat(chat_id):
        logger.info("ℹ️ Bot message from unauthorized chat ignored")
        return {"handled": False, "reason": "unauthorized"}

    command = parse_command(text)
    if command is None:
        return {"handled": False, "reason": "not_a_command"}

    logger.info(f"🤖 Processing bot command /{command.name}")
    reply = execute_command(db, command, now)
    sent, error = await send_telegram_message(str(chat_id), reply.text, reply.parse_mode)
    if not sent:
        logger.error(f"❌ Could not deliver bot reply: {error}")

    return {"handled": True, "command": command.name, "reply_sent": sent}
