from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from marketplace.core.config import get_settings
from marketplace.core.logging_config import setup_logging as configure_logging

settings = get_settings()

celery_app = Celery(
    "real_estate_marketplace",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["marketplace.workers.tasks"],
)
celery_app.conf.timezone = "UTC"
celery_app.conf.beat_schedule = {
    "send-meeting-reminders": {
        "task": "marketplace.workers.tasks.send_meeting_reminders",
        "schedule": crontab(minute=settings.REMINDER_CRON_MINUTE),
    },
}


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
