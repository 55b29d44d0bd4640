from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, http_error
from app.models import get_db, User
from app.schemas import (
    LoginRequest, RegisterRequest, RegisterResponse, TokenResponse, UserResponse
)
from app.services import AuthService, ServiceError
from app.services.auth import create_access_token

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new account. The password hash is never returned."""
    try:
        user = AuthService(db).register(request.name, request.email, request.password)
    except ServiceError as e:
        raise http_error(e)
    return RegisterResponse(
        user=UserResponse.model_validate(user),
        message="User created successfully"
    )


@router.post("/auth/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    try:
        user = AuthService(db).authenticate(request.email, request.password)
    except ServiceError as e:
        raise http_error(e)
    return TokenResponse(
        access_token=create_access_token(user),
        user=UserResponse.model_validate(user)
    )


@router.get("/auth/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user
