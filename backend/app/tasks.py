"""
Async Tasks for Celery.
"""

import logging
from typing import List, Optional

from app.worker import celery_app
from app.models.database import SessionLocal
from app.services.dashboard import DashboardService

logger = logging.getLogger(__name__)


def check_low_stock(product_ids: Optional[List[int]] = None) -> int:
    """Create admin alerts for low-stock products. Runs inline or from Celery."""
    db = SessionLocal()
    try:
        return DashboardService(db).create_low_stock_alerts(product_ids)
    finally:
        db.close()


@celery_app.task(bind=True, name="app.tasks.check_low_stock_async")
def check_low_stock_async(self, product_ids: Optional[List[int]] = None):
    """
    Background task run after an order is paid.
    """
    try:
        created = check_low_stock(product_ids)
        return {"notifications_created": created, "status": "completed"}
    except Exception as e:
        logger.error("Error in low-stock check: %s", e)
        raise


def queue_low_stock_check(product_ids: List[int], background_tasks=None):
    """
    Queue the low-stock check on Celery; fall back to a FastAPI background
    task when the broker is unreachable.
    """
    try:
        check_low_stock_async.delay(product_ids=product_ids)
    except Exception as e:
        logger.warning("Failed to queue low-stock check (Redis down?): %s", e)
        if background_tasks is not None:
            background_tasks.add_task(check_low_stock, product_ids)
