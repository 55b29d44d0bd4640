import base64
from datetime import datetime

import pytest
import requests

from app.services import InvalidStateError, MpesaError
from app.services.payments import mpesa
from app.services.payments.mpesa import (
    MpesaClient, clear_token_cache, generate_password, get_timestamp, normalize_phone_number
)
from app.services.payments.payments import parse_transaction_date


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def daraja(monkeypatch):
    """Record Daraja traffic and answer with canned responses."""
    clear_token_cache()
    traffic = {"get": [], "post": []}

    def fake_get(url, headers=None, timeout=None):
        traffic["get"].append({"url": url, "headers": headers})
        return FakeResponse({"access_token": "tok-123", "expires_in": "3599"})

    def fake_post(url, json=None, headers=None, timeout=None):
        traffic["post"].append({"url": url, "json": json, "headers": headers})
        return FakeResponse({"ResponseCode": "0", "CheckoutRequestID": "ws_CO_1"})

    monkeypatch.setattr(mpesa.requests, "get", fake_get)
    monkeypatch.setattr(mpesa.requests, "post", fake_post)
    yield traffic
    clear_token_cache()


def make_client():
    return MpesaClient(
        consumer_key="key",
        consumer_secret="secret",
        shortcode="174379",
        passkey="passkey",
        callback_url="https://example.com/api/payments/mpesa-callback"
    )


@pytest.mark.parametrize("raw, expected", [
    ("0712345678", "254712345678"),
    ("+254712345678", "254712345678"),
    ("254112345678", "254112345678"),
    ("712345678", "254712345678"),
    ("0712 345 678", "254712345678"),
])
def test_normalize_phone_number(raw, expected):
    assert normalize_phone_number(raw) == expected


@pytest.mark.parametrize("raw", ["12345", "", "0812345678", "2547123456789"])
def test_normalize_phone_number_rejects(raw):
    with pytest.raises(InvalidStateError):
        normalize_phone_number(raw)


def test_timestamp_and_password():
    timestamp = get_timestamp(datetime(2024, 3, 5, 14, 7, 9))
    assert timestamp == "20240305140709"
    decoded = base64.b64decode(generate_password(timestamp, "174379", "pk")).decode()
    assert decoded == "174379pk20240305140709"


def test_parse_transaction_date():
    assert parse_transaction_date(20191219102115) == datetime(2019, 12, 19, 10, 21, 15)
    assert parse_transaction_date("garbage") is None
    assert parse_transaction_date(None) is None


def test_access_token_is_cached(daraja):
    client = make_client()
    assert client.get_access_token() == "tok-123"
    assert client.get_access_token() == "tok-123"
    assert len(daraja["get"]) == 1
    assert daraja["get"][0]["headers"]["Authorization"] == "Basic " + base64.b64encode(b"key:secret").decode()


def test_access_token_refreshes_before_expiry(daraja, monkeypatch):
    clock = {"now": 1_000_000.0}
    monkeypatch.setattr(mpesa.time, "time", lambda: clock["now"])
    client = make_client()

    client.get_access_token()
    # expires_in 3599 less the 100 second margin
    clock["now"] += 3498
    client.get_access_token()
    assert len(daraja["get"]) == 1

    clock["now"] += 1
    client.get_access_token()
    assert len(daraja["get"]) == 2


def test_unconfigured_client_raises():
    client = make_client()
    client.passkey = None
    assert not client.is_configured
    with pytest.raises(MpesaError):
        client.get_access_token()


def test_stk_push_payload(daraja):
    data = make_client().stk_push("0712345678", 699.2, "Order 7")
    assert data["CheckoutRequestID"] == "ws_CO_1"

    sent = daraja["post"][0]
    assert sent["headers"]["Authorization"] == "Bearer tok-123"
    payload = sent["json"]
    assert payload["Amount"] == 700
    assert payload["PartyA"] == payload["PhoneNumber"] == "254712345678"
    assert payload["PartyB"] == payload["BusinessShortCode"] == "174379"
    assert payload["TransactionType"] == "CustomerPayBillOnline"
    assert payload["AccountReference"] == "Order 7"
    assert payload["CallBackURL"].endswith("/mpesa-callback")


def test_stk_push_network_failure(daraja, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(mpesa.requests, "post", boom)
    with pytest.raises(MpesaError):
        make_client().stk_push("0712345678", 100, "Order 1")
