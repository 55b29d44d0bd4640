import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api import payments as payments_api
from app.api.deps import get_gemini_client, get_mpesa_client
from app.main import app
from app.models import get_db, Product, User, UserRole
from app.models.models import Base
from app.services.auth import create_access_token, hash_password
from app.services.seed import SeedService


class FakeMpesaClient:
    """Stands in for Daraja; accepts every push."""

    def __init__(self, response=None):
        self.calls = []
        self.response = response or {
            "MerchantRequestID": "29115-34620561-1",
            "CheckoutRequestID": "ws_CO_191220191020363925",
            "ResponseCode": "0",
            "ResponseDescription": "Success. Request accepted for processing",
            "CustomerMessage": "Success. Request accepted for processing",
        }

    @property
    def is_configured(self):
        return True

    def stk_push(self, phone_number, amount, account_reference, description="Payment for Order"):
        self.calls.append({
            "phone_number": phone_number,
            "amount": amount,
            "account_reference": account_reference,
        })
        return dict(self.response)


class FakeGeminiClient:
    def __init__(self, reply="Mulch the bed and water early in the morning.", configured=True):
        self.reply = reply
        self.configured = configured
        self.calls = []

    @property
    def is_configured(self):
        return self.configured

    def generate(self, history, message, image=None, system_instruction=None, use_search=True):
        self.calls.append({"history": history, "message": message, "image": image})
        return self.reply


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    @event.listens_for(engine, "connect")
    def _enable_fks(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mpesa():
    return FakeMpesaClient()


@pytest.fixture
def gemini():
    return FakeGeminiClient()


@pytest.fixture
def low_stock_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(
        payments_api, "queue_low_stock_check",
        lambda product_ids, background_tasks=None: calls.append(list(product_ids))
    )
    return calls


@pytest.fixture
def client(session_factory, mpesa, gemini, low_stock_calls):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mpesa_client] = lambda: mpesa
    app.dependency_overrides[get_gemini_client] = lambda: gemini
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email, role=UserRole.USER, name="Wanjiru Kamau", password="secret123"):
    user = User(name=name, email=email, password=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db, "wanjiru@example.com")


@pytest.fixture
def other_user(db):
    return make_user(db, "otieno@example.com", name="Otieno Ouma")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@shambafresh.co.ke", role=UserRole.ADMIN, name="Farm Admin")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin)}"}


@pytest.fixture
def products(db):
    SeedService(db).seed_all()
    return {p.name: p for p in db.query(Product).all()}
