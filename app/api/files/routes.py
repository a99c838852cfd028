import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.api.files import schemas, services
from app.api.projects.schemas import SuccessResponse
from app.api.projects.services import get_project
from app.core.exceptions import UnsupportedFileTypeError, UpstreamServiceError
from app.core.llm import LLMClient, get_llm_client
from app.core.security import get_current_user
from app.db.models.user import User
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


def _owned_project_or_404(db: Session, project_id: UUID, user: User):
    project = get_project(db, project_id, user.id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("/{project_id}/files", response_model=SuccessResponse)
def upload_file(
    project_id: UUID,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
    current_user: User = Depends(get_current_user)
):
    project = _owned_project_or_404(db, project_id, current_user)

    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="File required")

    try:
        services.upload_project_file(
            db,
            llm,
            project_id=project.id,
            data=file.file.read(),
            filename=file.filename,
            mime_type=file.content_type,
        )
    except UnsupportedFileTypeError as e:
        logger.warning("Rejected upload for project %s: %s", project.id, e)
        raise HTTPException(status_code=400, detail="Unsupported file type")
    except UpstreamServiceError:
        logger.exception("File upload failed for project %s", project.id)
        raise HTTPException(status_code=500, detail="Upload failed")

    return SuccessResponse()


@router.get("/{project_id}/files", response_model=List[schemas.FileReferenceOut])
def list_files(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = _owned_project_or_404(db, project_id, current_user)
    return services.get_files(db, project.id)


@router.delete("/{project_id}/files", response_model=schemas.FileClearResponse)
def clear_files(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = _owned_project_or_404(db, project_id, current_user)
    deleted = services.clear_files(db, project.id)
    return schemas.FileClearResponse(deleted=deleted)
