"""
SQLAlchemy Database Models for the Shamba Fresh storefront.

Tables:
- users, user_preferences, notifications: Accounts and dashboard state
- categories, products: Produce catalog with stock levels
- quotes: Quote requests from the storefront cart
- orders, order_items, transactions: Checkout and M-Pesa payments
- posts: Blog content
- problems: Farm doctor diagnostic catalogue
- chat_sessions, chat_messages: Farm doctor conversations
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Float, DateTime,
    ForeignKey, Boolean, Text, JSON, Enum as SQLEnum
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class UserRole(str, enum.Enum):
    """Account roles."""
    USER = "USER"
    ADMIN = "ADMIN"


class OrderStatus(str, enum.Enum):
    """Order lifecycle. PENDING -> PENDING_PAYMENT -> PAID | FAILED."""
    PENDING = "PENDING"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class PostStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class ProblemSeverity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class MessageSender(str, enum.Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"


class User(Base):
    """Registered customer or administrator."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200))
    email = Column(String(320), unique=True, nullable=False, index=True)
    password = Column(String(200))  # bcrypt hash, never serialized
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    orders = relationship("Order", back_populates="user")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    preference = relationship("UserPreference", back_populates="user", uselist=False, cascade="all, delete-orphan")
    chat_sessions = relationship("ChatSession", back_populates="user")


class UserPreference(Base):
    """Per-user dashboard layout."""
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    dashboard_layout = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="preference")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="notifications")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    """Produce catalog."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(300), nullable=False, index=True)
    description = Column(Text)
    price = Column(Float, nullable=False)
    image = Column(String(1000))
    unit = Column(String(50), nullable=False, default="kg")
    in_stock = Column(Boolean, default=True, nullable=False)
    stock_quantity = Column(Integer, default=0, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    category = relationship("Category", back_populates="products")
    order_items = relationship("OrderItem", back_populates="product")


class Quote(Base):
    """
    Quote request from the storefront cart.
    Items are stored as a {product_id: quantity} map.
    """
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    message = Column(Text, default="")
    items = Column(JSON, nullable=False)
    sub_total = Column(Float, nullable=False)
    estimated_tax = Column(Float, nullable=False)
    total = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Order(Base):
    """
    Checkout order.
    checkout_request_id links the order to an M-Pesa STK push.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    phone_number = Column(String(20))
    total_amount = Column(Float, nullable=False, default=0.0)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True)
    checkout_request_id = Column(String(100), unique=True, nullable=True, index=True)
    result_description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="order")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)  # Price at time of order

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")


class Transaction(Base):
    """
    Confirmed M-Pesa payment.
    Immutable once written; the receipt number is unique.
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    mpesa_receipt = Column(String(50), unique=True, nullable=False)
    amount = Column(Float, nullable=False)
    phone_number = Column(String(20))
    transaction_date = Column(DateTime, default=datetime.utcnow, index=True)

    order = relationship("Order", back_populates="transactions")


class Post(Base):
    """Blog post."""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(300), unique=True, nullable=False, index=True)
    title = Column(String(300), nullable=False)
    excerpt = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String(200), nullable=False)
    image_url = Column(String(1000))
    status = Column(SQLEnum(PostStatus), nullable=False, default=PostStatus.PUBLISHED, index=True)
    date = Column(DateTime, default=datetime.utcnow, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Problem(Base):
    """
    Farm doctor diagnostic entry.
    cause, follow_up and action are ordered lists of short strings.
    """
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(300), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    severity = Column(SQLEnum(ProblemSeverity), nullable=False)
    image = Column(String(1000))
    emoji = Column(String(16))
    cause = Column(JSON, nullable=False, default=list)
    follow_up = Column(JSON, nullable=False, default=list)
    time_to_fix = Column(String(100))
    difficulty = Column(String(50))
    action = Column(JSON, nullable=False, default=list)


class ChatSession(Base):
    """Farm doctor conversation. Guest sessions have no user."""
    __tablename__ = "chat_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    title = Column(String(300))
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="chat_sessions")
    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at"
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    sender = Column(SQLEnum(MessageSender), nullable=False)
    text = Column(Text, nullable=False)
    image_url = Column(Text)
    suggested_action = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    session = relationship("ChatSession", back_populates="messages")
