"""
Webhook Security Module

Shared-secret checks for machine-to-machine endpoints:
- the external scheduler calling POST /reminders/check (X-Cron-Secret)
- Telegram calling POST /bot/webhook (X-Telegram-Bot-Api-Secret-Token)
"""

import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException

from . import config

logger = logging.getLogger(__name__)


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Uses hmac.compare_digest which is designed for this purpose.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


async def verify_cron_secret(x_cron_secret: Optional[str] = Header(None)) -> None:
    """Dependency for scheduler-triggered endpoints; fails closed when CRON_SECRET is unset"""
    if not config.CRON_SECRET:
        logger.error("❌ CRON_SECRET not configured - rejecting scheduled call")
        raise HTTPException(status_code=503, detail="Cron secret not configured")

    if not constant_time_compare(x_cron_secret, config.CRON_SECRET):
        logger.warning("⚠️ Scheduled call with invalid cron secret")
        raise HTTPException(status_code=401, detail="Invalid cron secret")


def verify_telegram_secret(header_value: Optional[str]) -> bool:
    """True when no webhook secret is configured or the echoed header matches it"""
    if not config.TELEGRAM_WEBHOOK_SECRET:
        return True
    return constant_time_compare(header_value, config.TELEGRAM_WEBHOOK_SECRET)
