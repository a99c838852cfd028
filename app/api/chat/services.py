# app/api/chat/services.py

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.chat.context import build_context, file_part
from app.api.projects.services import get_project_or_raise
from app.config import settings
from app.core.exceptions import EmptyReplyError
from app.core.llm import LLMClient
from app.db.models.chat.chat_message import ChatMessage
from app.db.models.chat.chat_session import ChatSession
from app.db.models.project_file import ProjectFileReference

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't generate a response."


# ---------------------------------------------------
# 🛠️ Chat Session Management
# ---------------------------------------------------

def get_chat_session(db: Session, project_id: UUID, user_id: int) -> Optional[ChatSession]:
    """Fetch the chat session for a (project, user) pair."""
    return db.query(ChatSession)\
             .filter(ChatSession.project_id == project_id, ChatSession.user_id == user_id)\
             .first()


def get_or_create_chat_session(db: Session, project_id: UUID, user_id: int) -> ChatSession:
    """
    Return the pair's session, creating it on first use.

    A unique constraint on (project_id, user_id) decides concurrent first
    messages: the loser of the insert race rolls back and reads the winner's row.
    """
    chat_session = get_chat_session(db, project_id, user_id)
    if chat_session:
        return chat_session

    chat_session = ChatSession(project_id=project_id, user_id=user_id)
    db.add(chat_session)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Chat session for project %s created concurrently, reusing it", project_id)
        return get_chat_session(db, project_id, user_id)

    db.refresh(chat_session)
    logger.info("Created chat session %s for project %s", chat_session.id, project_id)
    return chat_session


# ---------------------------------------------------
# 🛠️ Message Handling
# ---------------------------------------------------

def get_recent_messages(db: Session, chat_session_id: UUID, limit: int) -> list[ChatMessage]:
    """The newest ``limit`` messages of a session, oldest first."""
    if limit <= 0:
        return []
    newest_first = db.query(ChatMessage)\
                     .filter(ChatMessage.chat_session_id == chat_session_id)\
                     .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())\
                     .limit(limit)\
                     .all()
    return list(reversed(newest_first))


def list_messages(db: Session, project_id: UUID, user_id: int) -> list[ChatMessage]:
    """Full history of the caller's session on a project, oldest first."""
    return db.query(ChatMessage)\
             .join(ChatSession, ChatMessage.chat_session_id == ChatSession.id)\
             .filter(ChatSession.project_id == project_id, ChatSession.user_id == user_id)\
             .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())\
             .all()


def persist_user_message_only(db: Session, project_id: UUID, user_id: int, content: str) -> ChatMessage:
    """Store a user message without a reply so the project keeps a usable session."""
    chat_session = get_or_create_chat_session(db, project_id, user_id)
    message = ChatMessage(chat_session_id=chat_session.id, role="user", content=content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


# ---------------------------------------------------
# 🤖 Model Integration
# ---------------------------------------------------

def send_message(
    db: Session,
    llm: LLMClient,
    project_id: UUID,
    user_id: int,
    content: str,
    current_file: Optional[ProjectFileReference] = None,
) -> str:
    """
    Run one exchange: assemble context, call the model, store both messages.

    Raises ProjectNotFoundError if the caller does not own the project. If the
    model call raises, nothing is written for this exchange.
    """
    project = get_project_or_raise(db, project_id, user_id)
    chat_session = get_or_create_chat_session(db, project.id, user_id)

    history = get_recent_messages(db, chat_session.id, settings.MAX_HISTORY_MESSAGES)
    file_refs = db.query(ProjectFileReference)\
                  .filter(ProjectFileReference.project_id == project.id)\
                  .order_by(ProjectFileReference.created_at.asc())\
                  .all()

    turns = build_context(
        system_prompt=project.system_prompt,
        history=history,
        file_refs=file_refs,
        message=content,
        current_file=file_part(current_file) if current_file else None,
        max_history=settings.MAX_HISTORY_MESSAGES,
    )

    try:
        reply = llm.generate(turns)
    except EmptyReplyError:
        logger.warning("Model returned an empty reply for project %s", project.id)
        reply = FALLBACK_REPLY

    db.add_all([
        ChatMessage(chat_session_id=chat_session.id, role="user", content=content),
        ChatMessage(chat_session_id=chat_session.id, role="assistant", content=reply),
    ])
    db.commit()

    return reply
