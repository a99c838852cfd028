# app/db/models/__init__.py
from .user import User
from .project import Project
from .project_file import ProjectFileReference
from .chat import ChatSession, ChatMessage
