import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.chat import schemas, services
from app.api.files import services as file_services
from app.api.projects.services import get_project
from app.core.exceptions import UpstreamServiceError
from app.core.llm import LLMClient, get_llm_client
from app.core.security import get_current_user, get_optional_user
from app.db.models.user import User
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{project_id}/chat", response_model=List[schemas.ChatMessageOut])
def fetch_chat_history(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    if current_user is None:
        return JSONResponse(content=[], status_code=401)

    if not get_project(db, project_id, current_user.id):
        raise HTTPException(status_code=404, detail="Project not found")

    return services.list_messages(db, project_id=project_id, user_id=current_user.id)


@router.post("/{project_id}/chat", response_model=schemas.ChatReply)
def send_chat_message(
    project_id: UUID,
    payload: schemas.ChatSendRequest,
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
    current_user: User = Depends(get_current_user)
):
    if not payload.message.strip():
        raise HTTPException(status_code=400, detail="Message required")

    project = get_project(db, project_id, current_user.id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    # Only the file uploaded alongside this message rides on the new turn
    current_file = file_services.get_latest_file(db, project.id) if payload.has_file else None

    try:
        reply = services.send_message(
            db,
            llm,
            project_id=project.id,
            user_id=current_user.id,
            content=payload.message,
            current_file=current_file,
        )
    except UpstreamServiceError:
        logger.exception("Chat exchange failed for project %s", project.id)
        raise HTTPException(status_code=500, detail="Failed to process chat")

    return schemas.ChatReply(reply=reply)
