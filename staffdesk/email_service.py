"""
Email Service using Resend
Compiles MJML templates to HTML and sends candidate e-mails
"""

import logging
from datetime import date
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    BOOKING_URL_PATH,
    CONTRACT_TOKEN_EXPIRE_DAYS,
    CONTRACT_URL_PATH,
    EMAIL_FROM_ADDRESS,
    FRONTEND_URL,
    HR_FROM_ADDRESS,
    RESEND_API_KEY,
)
from .email_templates import (
    appointment_confirmation_template,
    appointment_invitation_template,
    contract_request_template,
    employment_welcome_template,
    missed_appointment_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when an e-mail could not be handed to the provider"""


def booking_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}{BOOKING_URL_PATH}/{token}"


def contract_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}{CONTRACT_URL_PATH}/{token}"


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns an object/dict with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email via Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Resend response dict

    Raises:
        EmailDeliveryError: when Resend is not configured or rejects the message
    """
    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Candidate e-mails
# ============================================


async def send_appointment_invitation(to: str, first_name: str, last_name: str, token: str) -> dict:
    """Invite a recipient to book an interview slot"""
    return await send_email(
        to=to,
        subject="Herzlichen Glückwunsch - Terminbuchung für Ihr Bewerbungsgespräch bei Expandere",
        mjml_content=appointment_invitation_template(first_name, last_name, booking_url(token)),
    )


async def send_appointment_confirmation(
    to: str, first_name: str, last_name: str, appointment_date: date, appointment_time: str
) -> dict:
    return await send_email(
        to=to,
        subject="Terminbestätigung - Ihr Bewerbungsgespräch bei Expandere",
        mjml_content=appointment_confirmation_template(
            first_name, last_name, appointment_date, appointment_time
        ),
    )


async def send_missed_appointment_email(
    to: str,
    first_name: str,
    last_name: str,
    appointment_date: date,
    appointment_time: str,
    token: str,
) -> dict:
    return await send_email(
        to=to,
        subject="Verpasster Termin - Neuen Termin buchen bei Expandere",
        mjml_content=missed_appointment_template(
            first_name, last_name, appointment_date, appointment_time, booking_url(token)
        ),
    )


async def send_contract_request_email(to: str, first_name: str, last_name: str, token: str) -> dict:
    return await send_email(
        to=to,
        subject="Arbeitsvertrag - Weitere Informationen erforderlich",
        mjml_content=contract_request_template(
            first_name, last_name, contract_url(token), CONTRACT_TOKEN_EXPIRE_DAYS
        ),
        from_address=HR_FROM_ADDRESS,
    )


async def send_employment_welcome_email(
    to: str,
    first_name: str,
    last_name: str,
    password: str,
    start_date: date,
    account_existed: bool,
) -> dict:
    """Credentials e-mail after a contract was accepted"""
    if account_existed:
        subject = "🎉 Arbeitsvertrag angenommen - Zugangsdaten aktualisiert!"
    else:
        subject = f"🎉 Willkommen im Team - Ihr Arbeitsvertrag wurde angenommen, {first_name}!"

    return await send_email(
        to=to,
        subject=subject,
        mjml_content=employment_welcome_template(
            first_name,
            last_name,
            to,
            password,
            start_date,
            account_existed,
            login_url=f"{FRONTEND_URL.rstrip('/')}/auth",
        ),
        from_address=HR_FROM_ADDRESS,
    )
