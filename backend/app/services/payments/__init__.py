# Payments module
from app.services.payments.mpesa import (
    MpesaClient, generate_password, get_timestamp, normalize_phone_number, clear_token_cache
)
from app.services.payments.payments import PaymentService, parse_transaction_date

__all__ = [
    "MpesaClient",
    "generate_password",
    "get_timestamp",
    "normalize_phone_number",
    "clear_token_cache",
    "PaymentService",
    "parse_transaction_date"
]
