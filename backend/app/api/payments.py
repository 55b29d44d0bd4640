import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.deps import get_mpesa_client, http_error
from app.models import get_db
from app.schemas import (
    PaymentStatusResponse, StkCallback, StkPushRequest, StkPushResponse
)
from app.services import MpesaClient, PaymentService, ServiceError
from app.tasks import queue_low_stock_check

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments")


@router.post("/stk-push", response_model=StkPushResponse)
def stk_push(
    request: StkPushRequest,
    client: MpesaClient = Depends(get_mpesa_client),
    db: Session = Depends(get_db)
):
    """
    Prompt the customer's phone for an M-Pesa payment.

    The order moves to PENDING_PAYMENT; the result arrives on the callback.
    """
    try:
        result = PaymentService(db, client).initiate_stk_push(
            order_id=request.order_id,
            amount=request.amount,
            phone_number=request.phone_number
        )
    except ServiceError as e:
        raise http_error(e)
    except Exception as e:
        logger.error("STK Push Error: %s", e)
        return JSONResponse(status_code=500, content={"detail": "Failed to initiate STK Push"})
    return result


@router.post("/mpesa-callback")
def mpesa_callback(
    background_tasks: BackgroundTasks,
    body: Any = Body(default=None),
    db: Session = Depends(get_db)
):
    """
    Daraja STK callback.

    Malformed payloads get 400. Everything else is acknowledged with 200,
    even when processing fails, so the gateway stops retrying.
    """
    raw = None
    if isinstance(body, dict):
        envelope = body.get("Body")
        raw = body.get("stkCallback") or (
            envelope.get("stkCallback") if isinstance(envelope, dict) else None
        )
    if not raw:
        return JSONResponse(status_code=400, content={"error": "Invalid callback data"})

    try:
        callback = StkCallback.model_validate(raw)
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "Invalid callback data"})

    try:
        order = PaymentService(db).handle_callback(callback)
    except Exception as e:
        logger.error("Mpesa Callback Error: %s", e)
        return {"result": "error", "message": "Internal Server Error"}

    if order is not None:
        queue_low_stock_check([item.product_id for item in order.items], background_tasks)

    return {"result": "ok"}


@router.get("/status/{checkout_request_id}", response_model=PaymentStatusResponse)
def payment_status(checkout_request_id: str, db: Session = Depends(get_db)):
    """Poll an order's payment state by CheckoutRequestID."""
    try:
        order = PaymentService(db).get_status(checkout_request_id)
    except ServiceError as e:
        raise http_error(e)
    return PaymentStatusResponse(
        order_id=order.id,
        status=order.status.value,
        checkout_request_id=order.checkout_request_id,
        result_description=order.result_description
    )
