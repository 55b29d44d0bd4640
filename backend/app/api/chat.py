import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_gemini_client, get_optional_user, http_error
from app.models import get_db, User
from app.schemas import (
    NewSessionRequest, NewSessionResponse,
    ChatMessageRequest, ChatMessageResponse, ChatMessageSchema, ChatMessagesResponse,
    GuestChatRequest, GuestChatResponse,
    SessionSummary, SessionTitleUpdate, SessionResponse, SessionEnvelope,
    CropAnalysisRequest, CropAnalysisResponse
)
from app.services import ChatService, CropAnalysisService, GeminiClient, ServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def require_session_id(session_id: Optional[str]) -> str:
    if not session_id:
        raise HTTPException(status_code=400, detail="sessionId is required")
    return session_id


def require_gemini(gemini: GeminiClient):
    if not gemini.is_configured:
        raise HTTPException(status_code=503, detail="AI service is not configured.")


# ============== Sessions ==============

@router.post("/chat/new", response_model=NewSessionResponse)
def new_chat_session(
    request: Optional[NewSessionRequest] = None,
    db: Session = Depends(get_db)
):
    """Start a chat. Sessions are owned when userId names an existing user."""
    session, welcome = ChatService(db).start_session(request.user_id if request else None)
    return NewSessionResponse(session_id=session.id, welcome_message=welcome)


@router.get("/chat/sessions", response_model=List[SessionSummary])
def list_chat_sessions(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ChatService(db).list_sessions(user)


@router.delete("/chat/sessions")
def delete_chat_session(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one of the caller's sessions together with its messages."""
    session_id = require_session_id(session_id)
    try:
        ChatService(db).delete_session(session_id, user)
    except ServiceError as e:
        raise http_error(e)
    return {"message": "Session deleted successfully"}


@router.patch("/chat/sessions/{session_id}", response_model=SessionEnvelope)
def rename_chat_session(
    session_id: str,
    update: SessionTitleUpdate,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    try:
        session = ChatService(db).rename_session(session_id, update.title, user)
    except ServiceError as e:
        raise http_error(e)
    return SessionEnvelope(session=SessionResponse.model_validate(session))


# ============== Messages ==============

@router.post("/chat/message", response_model=ChatMessageResponse)
def send_chat_message(
    request: ChatMessageRequest,
    user: Optional[User] = Depends(get_optional_user),
    gemini: GeminiClient = Depends(get_gemini_client),
    db: Session = Depends(get_db)
):
    """
    Send a message to the farm doctor and get its reply.

    The user's message is saved before Gemini is called, so it survives
    a failed reply.
    """
    require_gemini(gemini)
    try:
        reply = ChatService(db, gemini).send_message(
            session_id=request.session_id,
            text=request.user_message,
            image_url=request.image_url,
            user=user
        )
    except ServiceError as e:
        raise http_error(e)
    return ChatMessageResponse(
        message="success",
        assistant_message=reply.text,
        message_id=reply.id
    )


@router.get("/chat/message", response_model=ChatMessagesResponse)
def get_chat_messages(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    session_id = require_session_id(session_id)
    try:
        messages = ChatService(db).get_messages(session_id, user)
    except ServiceError as e:
        raise http_error(e)
    return ChatMessagesResponse(
        messages=[ChatMessageSchema.model_validate(m) for m in messages]
    )


@router.post("/chat/guest", response_model=GuestChatResponse)
def guest_chat(
    request: GuestChatRequest,
    gemini: GeminiClient = Depends(get_gemini_client),
    db: Session = Depends(get_db)
):
    """Stateless chat for visitors; the client keeps the history."""
    require_gemini(gemini)
    try:
        reply, message_id = ChatService(db, gemini).guest_reply(request.history, request.user_message)
    except ServiceError as e:
        raise http_error(e)
    return GuestChatResponse(assistant_message=reply, message_id=message_id)


# ============== Crop Analysis ==============

@router.post("/gemini-analysis", response_model=CropAnalysisResponse)
def analyze_crop(
    request: CropAnalysisRequest,
    gemini: GeminiClient = Depends(get_gemini_client)
):
    """Diagnose a crop photo with Gemini vision."""
    require_gemini(gemini)
    try:
        analysis = CropAnalysisService(gemini).analyze(request.image_data, request.prompt)
    except ServiceError as e:
        raise http_error(e)
    return CropAnalysisResponse(analysis=analysis)
