"""
Telegram Bot Service
Sends admin notifications (new activation requests, reminders, command replies)
"""

import logging
from typing import Optional

import httpx

from ..config import TELEGRAM_ADMIN_CHAT_IDS, TELEGRAM_BOT_TOKEN

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


async def send_telegram_message(
    chat_id: str, text: str, parse_mode: Optional[str] = None
) -> tuple[bool, Optional[str]]:
    """
    Send one message via the Bot API

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not TELEGRAM_BOT_TOKEN:
        logger.warning("⚠️ TELEGRAM_BOT_TOKEN not configured, message not sent")
        return False, "Telegram not configured"

    payload = {"chat_id": chat_id, "text": text}
    if parse_mode:
        payload["parse_mode"] = parse_mode

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TELEGRAM_API_URL}/bot{TELEGRAM_BOT_TOKEN}/sendMessage",
                json=payload,
                timeout=10.0,
            )

        if response.status_code == 200:
            logger.info(f"✅ Telegram message sent to chat {chat_id}")
            return True, None

        try:
            error_message = response.json().get("description", "Unknown error")
        except ValueError:
            error_message = response.text or "Unknown error"
        logger.error(f"❌ Telegram API error [{response.status_code}] for chat {chat_id}: {error_message}")
        return False, error_message

    except httpx.HTTPError as e:
        logger.error(f"❌ Telegram API error for chat {chat_id}: {str(e)}")
        return False, str(e)


async def send_to_admin_chats(
    text: str, parse_mode: Optional[str] = None, chat_ids: Optional[list[str]] = None
) -> dict:
    """
    Send a message to every authorized admin chat

    Returns:
        Dict with sent/failed counts and per-chat errors
    """
    targets = TELEGRAM_ADMIN_CHAT_IDS if chat_ids is None else chat_ids
    result = {"sent": 0, "failed": 0, "errors": {}}

    if not targets:
        logger.warning("⚠️ No TELEGRAM_ADMIN_CHAT_IDS configured")
        return result

    for chat_id in targets:
        success, error = await send_telegram_message(chat_id, text, parse_mode)
        if success:
            result["sent"] += 1
        else:
            result["failed"] += 1
            result["errors"][chat_id] = error

    return result


def is_authorized_chat(chat_id) -> bool:
    return str(chat_id) in TELEGRAM_ADMIN_CHAT_IDS


# Message texts


def new_request_message(phone: str, access_code: str, short_id: str) -> str:
    return (
        f"🔔 Neue Anfrage eingegangen!\n📱 Phone: {phone}\n🔑 PIN: {access_code}"
        f"\n🆔 ID: {short_id}\n\nZum Aktivieren: /activate {short_id}"
    )


def sms_requested_message(phone: str, short_id: str) -> str:
    return (
        f"📨 SMS angefordert!\n📱 Phone: {phone}\n🆔 ID: {short_id}"
        f"\n\nCode senden: /send {short_id} <CODE>"
    )


def reminder_message(
    first_name: str,
    last_name: str,
    email: str,
    phone_note: Optional[str],
    appointment_label: str,
    minutes_until: int,
) -> str:
    return (
        "🔔 Terminerinnerung!\n\n"
        f"👤 Name: {first_name} {last_name}\n"
        f"📧 E-Mail: {email}\n"
        f"📱 Telefon: {phone_note or 'Nicht angegeben'}\n"
        f"🕐 Termin: {appointment_label}\n\n"
        f"⏰ Der Termin beginnt in ca. {minutes_until} Minuten!"
    )
