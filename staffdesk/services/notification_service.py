"""
Notification Dispatcher
Side-effect notifications (e-mail to candidates, Telegram to admins) that must
never fail or roll back the state change that triggered them
"""

import logging
from datetime import date
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


async def dispatch(notification_type: str, send_func: Callable[..., Awaitable], **kwargs) -> dict:
    """
    Run one notification and swallow its failure

    Returns:
        Dict with sent flag and error text
    """
    result = {"type": notification_type, "sent": False, "error": None}
    try:
        response = await send_func(**kwargs)
        # Telegram fan-out reports failures in its result instead of raising
        if isinstance(response, dict) and "sent" in response and "failed" in response:
            if response["sent"] == 0:
                raise RuntimeError(f"no admin chat accepted the message: {response.get('errors')}")
        result["sent"] = True
        logger.info(f"✅ {notification_type} notification sent")
    except Exception as e:
        result["error"] = str(e)
        logger.error(f"❌ Failed to send {notification_type} notification: {e}")
    return result


async def notify_appointment_confirmed(
    email: str, first_name: str, last_name: str, appointment_date: date, appointment_time: str
) -> dict:
    from ..email_service import send_appointment_confirmation

    return await dispatch(
        "appointment_confirmed",
        send_appointment_confirmation,
        to=email,
        first_name=first_name,
        last_name=last_name,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
    )


async def notify_new_activation_request(phone: str, access_code: str, short_id: str) -> dict:
    from .telegram_service import new_request_message, send_to_admin_chats

    return await dispatch(
        "activation_request",
        send_to_admin_chats,
        text=new_request_message(phone, access_code, short_id),
    )


async def notify_sms_requested(phone: str, short_id: str) -> dict:
    from .telegram_service import send_to_admin_chats, sms_requested_message

    return await dispatch(
        "sms_requested",
        send_to_admin_chats,
        text=sms_requested_message(phone, short_id),
    )


async def notify_employment_welcome(
    email: str,
    first_name: str,
    last_name: str,
    password: str,
    start_date: date,
    account_existed: bool,
) -> dict:
    from ..email_service import send_employment_welcome_email

    return await dispatch(
        "employment_welcome",
        send_employment_welcome_email,
        to=email,
        first_name=first_name,
        last_name=last_name,
        password=password,
        start_date=start_date,
        account_existed=account_existed,
    )
