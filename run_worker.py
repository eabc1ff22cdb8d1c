"""
Reminder Background Worker Runner
Run this as a separate process when no arq worker is deployed: python run_worker.py
"""

import asyncio
import logging
import sys

from staffdesk.workers.reminder_loop import run_reminder_loop

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("🚀 Starting reminder worker...")
    try:
        asyncio.run(run_reminder_loop())
    except KeyboardInterrupt:
        logger.info("👋 Reminder worker stopped by user")
    except Exception as e:
        logger.error(f"❌ Reminder worker crashed: {e}")
        sys.exit(1)
