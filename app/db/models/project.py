# app/db/models/project.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.db.session import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    system_prompt = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owner = relationship("User", back_populates="projects")
    chat_sessions = relationship(
        "ChatSession", back_populates="project", cascade="all, delete-orphan"
    )
    files = relationship(
        "ProjectFileReference", back_populates="project", cascade="all, delete-orphan"
    )
