# app/db/models/project_file.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.session import Base


class ProjectFileReference(Base):
    """Pointer to a file held by the model provider's file host, not the bytes."""

    __tablename__ = "project_file_references"

    # Autoincrement id breaks ties between uploads recorded in the same instant
    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    file_uri = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False, default="application/octet-stream")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="files")
