"""
Reminder loop without Redis
Runs the reminder check once a minute in a plain asyncio loop, for
deployments that do not run the arq worker
"""

import asyncio
import logging

from ..database import SessionLocal
from ..services.reminder_service import run_reminder_check

logger = logging.getLogger(__name__)

LOOP_INTERVAL_SECONDS = 60


async def run_reminder_pass() -> dict:
    db = SessionLocal()
    try:
        return await run_reminder_check(db)
    finally:
        db.close()


async def run_reminder_loop(interval: int = LOOP_INTERVAL_SECONDS):
    """
    Main worker loop - runs every minute
    """
    logger.info("🚀 Starting reminder loop...")

    while True:
        try:
            summary = await run_reminder_pass()
            if summary["reminders_sent"]:
                logger.info(f"🔔 {summary['reminders_sent']} reminders sent")
        except Exception as e:
            logger.error(f"❌ Error in reminder loop: {e}")
        await asyncio.sleep(interval)


if __name__ == "__main__":
    asyncio.run(run_reminder_loop())
