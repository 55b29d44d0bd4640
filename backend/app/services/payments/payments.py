"""
Order payment flow over M-Pesa STK push.

1. initiate_stk_push: ask Daraja to prompt the customer, remember the CheckoutRequestID
2. handle_callback: Daraja reports the outcome; a successful payment records the
   transaction, marks the order PAID, takes the stock and notifies the owner,
   all in one database transaction.

Daraja delivers callbacks at least once, so a receipt or order already
processed is acknowledged without being applied twice.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models import Notification, Order, OrderStatus, Product, Transaction
from app.schemas import StkCallback
from app.services.exceptions import ConflictError, MpesaError, NotFoundError
from app.services.payments.mpesa import MpesaClient

logger = logging.getLogger(__name__)


def parse_transaction_date(value) -> Optional[datetime]:
    """TransactionDate arrives as a YYYYMMDDHHMMSS number."""
    if value is None:
        return None
    try:
        return datetime.strptime(str(value), "%Y%m%d%H%M%S")
    except ValueError:
        return None


class PaymentService:
    def __init__(self, db: Session, client: Optional[MpesaClient] = None):
        self.db = db
        self.client = client or MpesaClient()

    def initiate_stk_push(self, order_id: int, amount: float, phone_number: str) -> dict:
        """
        Start an STK push for an order.

        Returns:
            {"CheckoutRequestID": ..., "message": ...}
        """
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        if order.status == OrderStatus.PAID:
            raise ConflictError("Order has already been paid")

        if order.total_amount and amount < order.total_amount:
            logger.warning(
                "STK push for order %s requests %.2f, below order total %.2f",
                order_id, amount, order.total_amount
            )

        data = self.client.stk_push(
            phone_number=phone_number,
            amount=amount,
            account_reference=f"Order {order_id}",
            description="Payment for Order"
        )

        response_code = str(data.get("ResponseCode", ""))
        description = data.get("ResponseDescription") or data.get("errorMessage") or "Payment request failed"
        if response_code != "0":
            raise MpesaError(description)

        order.checkout_request_id = data.get("CheckoutRequestID")
        order.status = OrderStatus.PENDING_PAYMENT
        order.phone_number = phone_number
        order.result_description = None
        self.db.commit()

        return {
            "CheckoutRequestID": order.checkout_request_id,
            "message": description
        }

    def handle_callback(self, callback: StkCallback) -> Optional[Order]:
        """
        Apply a Daraja STK callback.

        Returns the order when this call marked it PAID, otherwise None.
        Raises when the payment cannot be matched to an order; the caller
        still acknowledges the gateway.
        """
        checkout_id = callback.CheckoutRequestID

        if callback.ResultCode != 0:
            logger.info(
                "Payment failed for CheckoutRequestID %s: ResultCode %s (%s)",
                checkout_id, callback.ResultCode, callback.ResultDesc
            )
            self._mark_failed(checkout_id, callback.ResultDesc)
            return None

        amount = callback.metadata_value("Amount")
        receipt = callback.metadata_value("MpesaReceiptNumber")
        if not (amount and receipt and checkout_id):
            logger.warning("Successful callback missing Amount/MpesaReceiptNumber/CheckoutRequestID")
            return None

        phone = callback.metadata_value("PhoneNumber")
        transaction_date = parse_transaction_date(
            callback.metadata_value("TransactionDate")
        ) or datetime.utcnow()

        try:
            order = (
                self.db.query(Order)
                .filter(Order.checkout_request_id == checkout_id)
                .with_for_update()
                .first()
            )
            if not order:
                raise NotFoundError(f"Order not found for CheckoutRequestID: {checkout_id}")

            duplicate = self.db.query(Transaction).filter(
                Transaction.mpesa_receipt == str(receipt)
            ).first()
            if duplicate or order.status == OrderStatus.PAID:
                logger.info("Callback for order %s already applied (receipt %s)", order.id, receipt)
                self.db.rollback()
                return None

            # 1. Record transaction
            self.db.add(Transaction(
                order_id=order.id,
                mpesa_receipt=str(receipt),
                amount=float(amount),
                phone_number=str(phone) if phone is not None else order.phone_number,
                transaction_date=transaction_date
            ))

            # 2. Mark paid
            order.status = OrderStatus.PAID
            order.result_description = callback.ResultDesc

            # 3. Take stock
            for item in order.items:
                product = self.db.query(Product).filter(
                    Product.id == item.product_id
                ).with_for_update().first()
                if not product:
                    continue
                remaining = product.stock_quantity - item.quantity
                if remaining < 0:
                    logger.warning(
                        "Product %s oversold by %d on order %s",
                        product.id, -remaining, order.id
                    )
                product.stock_quantity = max(0, remaining)
                product.in_stock = product.stock_quantity > 0

            # 4. Notify owner
            if order.user_id:
                self.db.add(Notification(
                    user_id=order.user_id,
                    message=f"New order #{order.id} has been paid for!",
                    read=False
                ))

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Order %s paid: receipt %s amount %s", order.id, receipt, amount)
        return order

    def _mark_failed(self, checkout_id: Optional[str], description: Optional[str]):
        if not checkout_id:
            return
        order = self.db.query(Order).filter(Order.checkout_request_id == checkout_id).first()
        if not order or order.status == OrderStatus.PAID:
            return
        order.status = OrderStatus.FAILED
        order.result_description = description
        self.db.commit()

    def get_status(self, checkout_request_id: str) -> Order:
        order = self.db.query(Order).filter(
            Order.checkout_request_id == checkout_request_id
        ).first()
        if not order:
            raise NotFoundError("No order for this CheckoutRequestID")
        return order
