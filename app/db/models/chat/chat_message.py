# app/db/models/chat/chat_message.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.session import Base

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    # Autoincrement id breaks ties between rows written in the same instant
    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_session_id = Column(Uuid, ForeignKey('chat_sessions.id', ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(10), nullable=False)  # 'user' or 'assistant'
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("ChatSession", back_populates="messages")
