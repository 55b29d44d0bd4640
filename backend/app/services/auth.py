"""
Account registration, password hashing and bearer tokens.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models import User, UserRole
from app.services.exceptions import AuthenticationError, ConflictError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user: User, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return token claims or raise AuthenticationError."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


class AuthService:
    """Service for user accounts."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, name: str, email: str, password: str) -> User:
        email = email.lower()
        existing = self.db.query(User).filter(User.email == email).first()
        if existing:
            raise ConflictError("User with this email already exists.")

        role = UserRole.ADMIN if email in settings.admin_emails else UserRole.USER
        user = User(
            name=name,
            email=email,
            password=hash_password(password),
            role=role
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s (%s)", user.id, role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.password):
            raise AuthenticationError("Invalid email or password")
        return user

    def get_user_from_token(self, token: str) -> User:
        claims = decode_access_token(token)
        try:
            user_id = int(claims.get("sub"))
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token subject")

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise AuthenticationError("User no longer exists")
        return user
