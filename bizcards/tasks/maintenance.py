"""Celery housekeeping tasks."""

import logging

from sqlalchemy.orm import Session

from bizcards.celery_app import app as celery_app
from bizcards.database import SessionLocal
from bizcards.services.auth import get_login_tracker

logger = logging.getLogger(__name__)


@celery_app.task
def sweep_login_attempts() -> dict:
    """Delete login attempt records whose block has expired.

    Runs hourly via celery-beat. Expired records already read as absent, so
    this only keeps the table small.

    Returns:
        dict with the number of removed records
    """
    db: Session = SessionLocal()
    try:
        removed = get_login_tracker(db).sweep_expired()
        if removed:
            logger.info(f"Swept {removed} expired login attempt records")
        return {"removed": removed}
    finally:
        db.close()
