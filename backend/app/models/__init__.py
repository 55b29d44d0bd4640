# Models module
from app.models.models import (
    Base, User, UserPreference, Notification,
    Category, Product, Quote,
    Order, OrderItem, Transaction,
    Post, Problem, ChatSession, ChatMessage,
    UserRole, OrderStatus, PostStatus, ProblemSeverity, MessageSender
)
from app.models.database import get_db, create_tables, drop_tables, session_scope, SessionLocal, engine

__all__ = [
    "Base", "User", "UserPreference", "Notification",
    "Category", "Product", "Quote",
    "Order", "OrderItem", "Transaction",
    "Post", "Problem", "ChatSession", "ChatMessage",
    "UserRole", "OrderStatus", "PostStatus", "ProblemSeverity", "MessageSender",
    "get_db", "create_tables", "drop_tables", "session_scope", "SessionLocal", "engine"
]
