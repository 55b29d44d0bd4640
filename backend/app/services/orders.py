"""
Checkout orders built from the storefront cart.
"""

import logging
from collections import OrderedDict
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models import Order, OrderItem, OrderStatus, Product, User, UserRole
from app.schemas import OrderItemRequest, OrderItemResponse, OrderResponse
from app.services.exceptions import ConflictError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        status=order.status.value,
        total_amount=order.total_amount,
        phone_number=order.phone_number,
        checkout_request_id=order.checkout_request_id,
        items=[
            OrderItemResponse(
                product_id=item.product_id,
                product_name=item.product.name if item.product else "Unknown",
                quantity=item.quantity,
                unit_price=item.unit_price
            )
            for item in order.items
        ],
        created_at=order.created_at
    )


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def create_order(
        self,
        items: List[OrderItemRequest],
        user: Optional[User] = None,
        phone_number: Optional[str] = None
    ) -> Order:
        """
        Create a PENDING order with prices snapshotted from the catalog.

        Stock is checked here but only decremented once M-Pesa confirms payment.
        """
        # Merge repeated lines for the same product
        quantities: "OrderedDict[int, int]" = OrderedDict()
        for item in items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        products = {
            p.id: p for p in
            self.db.query(Product).filter(Product.id.in_(list(quantities))).all()
        }

        order = Order(
            user_id=user.id if user else None,
            phone_number=phone_number,
            status=OrderStatus.PENDING
        )
        total = 0.0
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if not product:
                raise NotFoundError(f"Product with ID {product_id} not found")
            if quantity > product.stock_quantity:
                raise ConflictError(
                    f"Only {product.stock_quantity} {product.unit} of {product.name} in stock"
                )
            order.items.append(OrderItem(
                product_id=product.id,
                quantity=quantity,
                unit_price=product.price
            ))
            total += product.price * quantity

        order.total_amount = total
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info("Order %s created (%d lines, total %.2f)", order.id, len(order.items), total)
        return order

    def get_order(self, order_id: int, user: Optional[User] = None) -> Order:
        """
        Fetch an order for display.
        Owned orders are visible to their owner and admins; guest orders to anyone with the id.
        """
        order = (
            self.db.query(Order)
            .options(joinedload(Order.items).joinedload(OrderItem.product))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            raise NotFoundError("Order not found")

        if order.user_id is not None:
            is_owner = user is not None and user.id == order.user_id
            is_admin = user is not None and user.role == UserRole.ADMIN
            if not (is_owner or is_admin):
                raise PermissionDeniedError("Access denied to this order")
        return order
