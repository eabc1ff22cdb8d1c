"""Telegram webhook for the admin bot"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.bot_commands import process_update
from ..webhook_security import verify_telegram_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bot", tags=["Bot"])


@router.post("/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    Receives Telegram updates. Anything other than a bad secret answers 200
    so Telegram does not redeliver the update.
    """
    if not verify_telegram_secret(x_telegram_bot_api_secret_token):
        logger.warning("⚠️ Telegram webhook call with invalid secret token")
        raise HTTPException(status_code=401, detail="Invalid webhook secret")

    try:
        update = await request.json()
    except ValueError:
        logger.warning("⚠️ Telegram webhook body is not valid JSON")
        return {"ok": True, "handled": False}

    if not isinstance(update, dict):
        return {"ok": True, "handled": False}

    try:
        result = await process_update(db, update)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error processing Telegram update {update.get('update_id')}: {e}")
        return {"ok": True, "handled": False}

    return {"ok": True, **result}
