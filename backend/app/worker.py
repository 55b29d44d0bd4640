"""
Celery Worker Configuration.

Handles asynchronous tasks like:
- Low-stock alerts after paid orders take stock
- A morning sweep for stock lowered by hand
"""

from celery import Celery
from celery.schedules import crontab
from app.config import settings

# Initialize Celery
celery_app = Celery(
    "shamba_fresh_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Africa/Nairobi",
    enable_utc=True,
    broker_connection_retry_on_startup=False,
)

# Run with `celery -A app.worker beat`
celery_app.conf.beat_schedule = {
    "low-stock-sweep": {
        "task": "app.tasks.check_low_stock_async",
        "schedule": crontab(hour=6, minute=0),
    },
}

# Register app.tasks
celery_app.autodiscover_tasks(['app'])
