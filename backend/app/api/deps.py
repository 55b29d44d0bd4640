"""
Shared route dependencies: authentication, external clients and service-error translation.
"""

from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.models import get_db, User, UserRole
from app.services import (
    AuthService, AuthenticationError, GeminiClient, MpesaClient, ServiceError
)

bearer_scheme = HTTPBearer(auto_error=False)


def http_error(error: ServiceError) -> HTTPException:
    """Map a service error onto its HTTP status."""
    return HTTPException(status_code=error.status_code, detail=error.message)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """The caller, or None when no bearer token was sent. A bad token is still a 401."""
    if not credentials:
        return None
    try:
        return AuthService(db).get_user_from_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message, headers={"WWW-Authenticate": "Bearer"})


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Unauthorized: User not logged in",
            headers={"WWW-Authenticate": "Bearer"}
        )
    try:
        return AuthService(db).get_user_from_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message, headers={"WWW-Authenticate": "Bearer"})


def get_admin_user(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def get_mpesa_client() -> MpesaClient:
    return MpesaClient()


def get_gemini_client() -> GeminiClient:
    return GeminiClient()
