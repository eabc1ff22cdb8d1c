"""Scheduler-triggered reminder check"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.reminder_service import run_reminder_check
from ..webhook_security import verify_cron_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.post("/check")
async def check_reminders(
    _: None = Depends(verify_cron_secret),
    db: Session = Depends(get_db),
):
    """
    Run the reminder check once. Meant for an external scheduler calling every
    few minutes; the arq worker runs the same check on its own cron.
    """
    logger.info("🔔 Reminder check triggered via HTTP")
    return await run_reminder_check(db)
