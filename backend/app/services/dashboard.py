"""
Admin dashboard: headline stats, per-user layout preferences and notifications.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models import (
    Notification, Order, Product, Transaction, User, UserPreference, UserRole
)
from app.schemas import DashboardStats
from app.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_DASHBOARD_LAYOUT = {
    "showStats": True,
    "showLowStockAlerts": True,
}

STATS_WINDOW_DAYS = 30


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        since = (now or datetime.utcnow()) - timedelta(days=STATS_WINDOW_DAYS)

        total_revenue = self.db.query(func.coalesce(func.sum(Transaction.amount), 0.0)).scalar()
        new_orders = self.db.query(func.count(Order.id)).filter(Order.created_at >= since).scalar()
        inventory_value = self.db.query(
            func.coalesce(func.sum(Product.price * Product.stock_quantity), 0.0)
        ).scalar()
        new_customers = self.db.query(func.count(User.id)).filter(User.created_at >= since).scalar()

        return DashboardStats(
            total_revenue=float(total_revenue or 0),
            new_orders=int(new_orders or 0),
            inventory_value=float(inventory_value or 0),
            new_customers=int(new_customers or 0)
        )

    # ----- Preferences -----

    def get_preferences(self, user: User) -> UserPreference:
        """Return the user's layout, creating the default on first read."""
        pref = self.db.query(UserPreference).filter(UserPreference.user_id == user.id).first()
        if not pref:
            pref = UserPreference(user_id=user.id, dashboard_layout=dict(DEFAULT_DASHBOARD_LAYOUT))
            self.db.add(pref)
            self.db.commit()
            self.db.refresh(pref)
        return pref

    def update_preferences(self, user: User, dashboard_layout: dict) -> UserPreference:
        pref = self.get_preferences(user)
        pref.dashboard_layout = dashboard_layout
        self.db.commit()
        self.db.refresh(pref)
        return pref

    # ----- Notifications -----

    def list_notifications(self, user: User) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user.id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def mark_read(self, user: User, notification_id: int) -> Notification:
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user.id
        ).first()
        if not notification:
            raise NotFoundError("Notification not found")

        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def create_low_stock_alerts(self, product_ids: Optional[List[int]] = None) -> int:
        """
        Notify every admin about products under the low-stock threshold.
        Skips a product when an admin already has an unread alert for it.
        """
        query = self.db.query(Product).filter(
            Product.stock_quantity < settings.LOW_STOCK_THRESHOLD
        )
        if product_ids:
            query = query.filter(Product.id.in_(product_ids))
        products = query.all()
        admins = self.db.query(User).filter(User.role == UserRole.ADMIN).all()

        created = 0
        for product in products:
            message = (
                f"Low stock: {product.name} has {product.stock_quantity} "
                f"{product.unit} left."
            )
            prefix = f"Low stock: {product.name} has"
            for admin in admins:
                exists = self.db.query(Notification.id).filter(
                    Notification.user_id == admin.id,
                    Notification.read == False,  # noqa: E712
                    Notification.message.startswith(prefix, autoescape=True)
                ).first()
                if exists:
                    continue
                self.db.add(Notification(user_id=admin.id, message=message))
                created += 1

        self.db.commit()
        if created:
            logger.info("Created %d low-stock notifications", created)
        return created
