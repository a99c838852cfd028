"""Create a project from a first message, naming it with the model."""

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from app.api.chat import services as chat_services
from app.api.files import services as file_services
from app.config import settings
from app.core.exceptions import UnsupportedFileTypeError, UpstreamServiceError
from app.core.llm import LLMClient
from app.db.models.project import Project
from app.db.models.project_file import ProjectFileReference

logger = logging.getLogger(__name__)

TITLE_PROMPT = (
    'Message: "{message}" \n\n Generate a 3-word title for a project based on the '
    "message above. Output ONLY the title text."
)
TITLE_MAX_LENGTH = 50
_TITLE_STRIP = re.compile(r"[\"'.*#]")


def clean_title(raw_title: str) -> str:
    """Drop quotes and markdown punctuation, trim, cap the length."""
    return _TITLE_STRIP.sub("", raw_title).strip()[:TITLE_MAX_LENGTH].strip()


def generate_project_name(llm: LLMClient, message: str) -> str:
    try:
        raw_title = llm.complete_text(TITLE_PROMPT.format(message=message))
    except UpstreamServiceError:
        logger.exception("Project title generation failed, using default name")
        return settings.DEFAULT_PROJECT_NAME

    return clean_title(raw_title) or settings.DEFAULT_PROJECT_NAME


def start_project(
    db: Session,
    llm: LLMClient,
    user_id: int,
    message: str,
    file_data: Optional[bytes] = None,
    filename: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> Project:
    """
    Bootstrap a project from its first message.

    Naming, file relay and the first exchange each degrade on upstream
    failure: default name, no file, and a session holding only the user's
    message, respectively. The project itself is always created.
    """
    project = Project(
        user_id=user_id,
        name=generate_project_name(llm, message),
        description="",
        system_prompt=settings.DEFAULT_SYSTEM_PROMPT,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Started project %s (%s) for user %s", project.id, project.name, user_id)

    current_file: Optional[ProjectFileReference] = None
    if file_data:
        try:
            current_file = file_services.upload_project_file(
                db, llm, project.id, file_data, filename or "upload", mime_type
            )
        except (UnsupportedFileTypeError, UpstreamServiceError):
            logger.exception("File handling failed for new project %s", project.id)

    try:
        chat_services.send_message(
            db, llm, project.id, user_id, message, current_file=current_file
        )
    except UpstreamServiceError:
        logger.exception("First exchange failed for project %s", project.id)
        chat_services.persist_user_message_only(db, project.id, user_id, message)

    return project
