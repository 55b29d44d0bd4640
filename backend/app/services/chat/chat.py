"""
Farm doctor chat sessions.

Sessions belong to a user or to nobody (guest). The server stores every turn;
Gemini generates the assistant replies from the recent history.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models import ChatMessage, ChatSession, MessageSender, User
from app.schemas import GuestHistoryItem
from app.services.chat.gemini import ContentPart, GeminiClient, model_turn, user_turn
from app.services.chat.prompts import TITLE_MAX_LENGTH, WELCOME_MESSAGE
from app.services.exceptions import (
    GeminiError, InvalidStateError, NotFoundError, PermissionDeniedError
)

logger = logging.getLogger(__name__)

ACTIVE = "active"


def make_title(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """First line of a message, cut on a word boundary."""
    line = " ".join(text.strip().split())
    if len(line) <= max_length:
        return line
    cut = line[:max_length].rsplit(" ", 1)[0] or line[:max_length]
    return cut.rstrip(" ,.;:") + "..."


def to_content(messages: List[ChatMessage]) -> List[ContentPart]:
    """Stored messages in Gemini role format, skipping blank turns."""
    history = []
    for msg in messages:
        if not msg.text or not msg.text.strip():
            continue
        if msg.sender == MessageSender.USER:
            history.append(user_turn(msg.text))
        else:
            history.append(model_turn(msg.text))
    return history


class ChatService:
    def __init__(self, db: Session, gemini: Optional[GeminiClient] = None):
        self.db = db
        self.gemini = gemini or GeminiClient()

    # ----- Sessions -----

    def start_session(self, user_id: Optional[str] = None) -> Tuple[ChatSession, str]:
        """
        Open a session with the assistant's welcome message.
        An unknown or malformed user id starts a guest session.
        """
        owner_id = None
        if user_id:
            if user_id.isdigit() and self.db.query(User.id).filter(User.id == int(user_id)).first():
                owner_id = int(user_id)
            else:
                logger.warning("[CHAT_SESSION_CREATE] Invalid userId provided: %s", user_id)

        session = ChatSession(user_id=owner_id, status=ACTIVE)
        self.db.add(session)
        self.db.flush()

        self.db.add(ChatMessage(
            session_id=session.id,
            user_id=owner_id,
            sender=MessageSender.ASSISTANT,
            text=WELCOME_MESSAGE
        ))
        self.db.commit()

        logger.info(
            "[CHAT_SESSION_CREATE] Session %s created (%s)",
            session.id, "authenticated" if owner_id else "guest"
        )
        return session, WELCOME_MESSAGE

    def get_session(self, session_id: str, user: Optional[User] = None) -> ChatSession:
        """
        Fetch a session, enforcing ownership for authenticated callers.
        Anonymous callers may use any session they hold the id of.
        """
        session = self.db.query(ChatSession).filter(ChatSession.id == session_id).first()
        if not session:
            raise NotFoundError("Chat session not found.")

        if user is not None and session.user_id != user.id:
            logger.warning(
                "[CHAT] Unauthorized access attempt: session=%s owner=%s user=%s",
                session_id, session.user_id, user.id
            )
            raise PermissionDeniedError("Access denied to this chat session.")
        return session

    def list_sessions(self, user: User) -> List[ChatSession]:
        return (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == user.id)
            .order_by(ChatSession.created_at.desc())
            .all()
        )

    def delete_session(self, session_id: str, user: User):
        session = self.db.query(ChatSession).filter(
            ChatSession.id == session_id,
            ChatSession.user_id == user.id
        ).first()
        if not session:
            raise PermissionDeniedError("Forbidden: Session not found or not owned by user")

        self.db.delete(session)
        self.db.commit()
        logger.info("[CHAT_SESSIONS_DELETE] Deleted session %s", session_id)

    def rename_session(self, session_id: str, title: str, user: Optional[User] = None) -> ChatSession:
        session = self.get_session(session_id, user)
        session.title = title
        self.db.commit()
        self.db.refresh(session)
        return session

    # ----- Messages -----

    def get_messages(self, session_id: str, user: Optional[User] = None) -> List[ChatMessage]:
        self.get_session(session_id, user)
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc())
            .all()
        )

    def get_history(self, session_id: str, limit: Optional[int] = None) -> List[ContentPart]:
        """The most recent `limit` non-empty turns, oldest first."""
        limit = limit or settings.CHAT_HISTORY_LIMIT
        recent = (
            self.db.query(ChatMessage)
            .filter(
                ChatMessage.session_id == session_id,
                ChatMessage.text.isnot(None),
                func.trim(ChatMessage.text) != ""
            )
            .order_by(ChatMessage.created_at.desc())
            .limit(limit)
            .all()
        )
        return to_content(list(reversed(recent)))

    def send_message(
        self,
        session_id: str,
        text: str,
        image_url: Optional[str] = None,
        user: Optional[User] = None
    ) -> ChatMessage:
        """
        Store the user's turn, ask Gemini, store and return the reply.

        The user's turn is kept even when Gemini fails.
        """
        if not self.gemini.is_configured:
            raise GeminiError("AI service is not configured.")

        session = self.get_session(session_id, user)
        if session.status != ACTIVE:
            raise InvalidStateError("This chat session is no longer active.")

        history = self.get_history(session_id)

        self.db.add(ChatMessage(
            session_id=session.id,
            user_id=session.user_id,
            sender=MessageSender.USER,
            text=text,
            image_url=image_url
        ))
        if not session.title:
            session.title = make_title(text)
        self.db.commit()
        logger.info("[CHAT_POST] User message saved: session=%s", session_id)

        reply = self.gemini.generate(history, text)

        assistant = ChatMessage(
            session_id=session.id,
            user_id=session.user_id,
            sender=MessageSender.ASSISTANT,
            text=reply
        )
        self.db.add(assistant)
        self.db.commit()
        self.db.refresh(assistant)
        logger.info("[CHAT_POST] Assistant response saved: session=%s message=%s", session_id, assistant.id)
        return assistant

    def guest_reply(self, history: List[GuestHistoryItem], text: str) -> Tuple[str, str]:
        """Answer without persisting anything. Returns (reply, message_id)."""
        contents = [
            user_turn(item.text) if item.sender.value == "USER" else model_turn(item.text)
            for item in history
            if item.text.strip()
        ]
        reply = self.gemini.generate(contents, text)
        return reply, str(uuid.uuid4())
