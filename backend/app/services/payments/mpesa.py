"""
M-Pesa Daraja client.

Implements Lipa Na M-Pesa Online (STK push):
- OAuth client-credentials token, cached until shortly before expiry
- Request password: base64(shortcode + passkey + timestamp)
- STK push request for a CustomerPayBillOnline payment

API Documentation: https://developer.safaricom.co.ke/APIs/MpesaExpressSimulate
"""

import base64
import logging
import math
import re
import time
from datetime import datetime
from typing import Dict, Optional, Tuple

import requests

from app.config.settings import settings
from app.services.exceptions import InvalidStateError, MpesaError

logger = logging.getLogger(__name__)

# Seconds shaved off the advertised token lifetime
TOKEN_EXPIRY_MARGIN = 100

# consumer_key -> (access_token, expires_at epoch seconds)
_token_cache: Dict[str, Tuple[str, float]] = {}


def get_timestamp(now: Optional[datetime] = None) -> str:
    """Daraja timestamp, YYYYMMDDHHMMSS in local time."""
    return (now or datetime.now()).strftime("%Y%m%d%H%M%S")


def generate_password(timestamp: str, shortcode: Optional[str] = None, passkey: Optional[str] = None) -> str:
    shortcode = shortcode or settings.MPESA_SHORTCODE
    passkey = passkey or settings.MPESA_PASSKEY or ""
    raw = f"{shortcode}{passkey}{timestamp}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def normalize_phone_number(phone_number: str) -> str:
    """
    Normalize a Kenyan MSISDN to 2547XXXXXXXX / 2541XXXXXXXX.

    Accepts 0712345678, +254712345678, 254712345678 and 712345678.
    """
    digits = re.sub(r"\D", "", phone_number or "")

    if digits.startswith("254"):
        normalized = digits
    elif digits.startswith("0") and len(digits) == 10:
        normalized = "254" + digits[1:]
    elif len(digits) == 9:
        normalized = "254" + digits
    else:
        raise InvalidStateError(
            "Invalid phone number format. Use 0712345678 or 254712345678"
        )

    if len(normalized) != 12 or normalized[3] not in ("7", "1"):
        raise InvalidStateError("Phone number must be 12 digits starting with 2547 or 2541")
    return normalized


def clear_token_cache():
    _token_cache.clear()


class MpesaClient:
    """
    Thin client over the Daraja REST API.
    Credentials default to application settings.
    """

    def __init__(
        self,
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        shortcode: Optional[str] = None,
        passkey: Optional[str] = None,
        callback_url: Optional[str] = None
    ):
        self.consumer_key = consumer_key or settings.MPESA_CONSUMER_KEY
        self.consumer_secret = consumer_secret or settings.MPESA_CONSUMER_SECRET
        self.shortcode = shortcode or settings.MPESA_SHORTCODE
        self.passkey = passkey or settings.MPESA_PASSKEY
        self.callback_url = callback_url or settings.MPESA_CALLBACK_URL
        self.auth_url = settings.MPESA_AUTH_URL or (
            f"{settings.mpesa_base_url}/oauth/v1/generate?grant_type=client_credentials"
        )
        self.stk_push_url = settings.MPESA_STK_PUSH_URL or (
            f"{settings.mpesa_base_url}/mpesa/stkpush/v1/processrequest"
        )
        self.timeout = settings.HTTP_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return bool(self.consumer_key and self.consumer_secret and self.passkey)

    def get_access_token(self) -> str:
        """Return a cached OAuth token or fetch a new one."""
        if not self.is_configured:
            raise MpesaError("M-Pesa credentials are not configured")

        cached = _token_cache.get(self.consumer_key)
        now = time.time()
        if cached and now < cached[1]:
            return cached[0]

        auth = base64.b64encode(
            f"{self.consumer_key}:{self.consumer_secret}".encode("utf-8")
        ).decode("ascii")

        try:
            response = requests.get(
                self.auth_url,
                headers={"Authorization": f"Basic {auth}"},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Error fetching M-Pesa access token: %s", e)
            raise MpesaError("Failed to get M-Pesa access token")

        token = data.get("access_token")
        if not token:
            raise MpesaError("Failed to get M-Pesa access token")

        expires_in = int(data.get("expires_in", 3599))
        _token_cache[self.consumer_key] = (token, now + expires_in - TOKEN_EXPIRY_MARGIN)
        return token

    def stk_push(
        self,
        phone_number: str,
        amount: float,
        account_reference: str,
        description: str = "Payment for Order"
    ) -> Dict:
        """
        Send an STK push prompt to the customer's phone.

        Returns the raw Daraja response body. A ResponseCode of "0" means the
        request was accepted; the outcome arrives later on the callback URL.
        """
        phone = normalize_phone_number(phone_number)
        access_token = self.get_access_token()
        timestamp = get_timestamp()

        payload = {
            "BusinessShortCode": self.shortcode,
            "Password": generate_password(timestamp, self.shortcode, self.passkey),
            "Timestamp": timestamp,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": int(math.ceil(amount)),
            "PartyA": phone,
            "PartyB": self.shortcode,
            "PhoneNumber": phone,
            "CallBackURL": self.callback_url,
            "AccountReference": account_reference,
            "TransactionDesc": description
        }

        try:
            response = requests.post(
                self.stk_push_url,
                json=payload,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("STK push request failed: %s", e)
            raise MpesaError("Failed to initiate STK Push")

        logger.info(
            "STK push for %s: ResponseCode=%s CheckoutRequestID=%s",
            account_reference, data.get("ResponseCode"), data.get("CheckoutRequestID")
        )
        return data
