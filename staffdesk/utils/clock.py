"""Wall-clock helpers for the agency's local time zone"""

import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import APP_TIMEZONE

logger = logging.getLogger(__name__)


def app_timezone(name: Optional[str] = None) -> ZoneInfo:
    """ZoneInfo for APP_TIMEZONE, falling back to Europe/Berlin on a bad name"""
    try:
        return ZoneInfo(name or APP_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"⚠️ Unknown timezone {name or APP_TIMEZONE!r}, using Europe/Berlin")
        return ZoneInfo("Europe/Berlin")


def local_now() -> datetime:
    """Current time in the agency's time zone, without tzinfo"""
    return datetime.now(app_timezone()).replace(tzinfo=None)
