import logging

import redis

from marketplace.core.config import get_settings
from marketplace.core.database import SessionLocal
from marketplace.services.meetings import send_due_reminders
from marketplace.workers.celery_app import celery_app

logger = logging.getLogger(__name__)
settings = get_settings()

REMINDER_LOCK_NAME = "locks:meeting-reminders"


def get_redis() -> redis.Redis:
    return redis.Redis.from_url(settings.REDIS_URL)


def run_reminders() -> dict:
    db = SessionLocal()
    try:
        sent = send_due_reminders(db)
        return {"status": "ok", "reminders_sent": sent}
    finally:
        db.close()


@celery_app.task(name="marketplace.workers.tasks.send_meeting_reminders")
def send_meeting_reminders() -> dict:
    # One run at a time across all workers and beat instances.
    lock = get_redis().lock(REMINDER_LOCK_NAME, timeout=settings.REMINDER_LOCK_TIMEOUT_SECONDS)
    if not lock.acquire(blocking=False):
        logger.info("Meeting reminder run skipped; another run holds the lock")
        return {"status": "skipped"}
    try:
        result = run_reminders()
        logger.info("Meeting reminder run finished: %s reminder(s) sent", result["reminders_sent"])
        return result
    finally:
        lock.release()
