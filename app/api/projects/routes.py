from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.llm import LLMClient, get_llm_client, is_supported_file_type
from app.core.security import get_current_user
from app.db.models.user import User
from . import bootstrap, schemas, services

router = APIRouter()

@router.get("", response_model=List[schemas.ProjectSummary])
def read_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return services.get_projects(db, current_user.id)

@router.post("", response_model=schemas.ProjectCreated)
def create_project(
    project: schemas.ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return services.create_project(db, project, current_user.id)

@router.post("/start", response_model=schemas.ProjectStarted)
def start_project(
    message: str = Form(""),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
    current_user: User = Depends(get_current_user)
):
    if not message.strip():
        raise HTTPException(status_code=400, detail="Message required")

    file_data = file.file.read() if file is not None and file.filename else None
    if file_data and not is_supported_file_type(file.content_type):
        raise HTTPException(status_code=400, detail="Unsupported file type")

    project = bootstrap.start_project(
        db,
        llm,
        user_id=current_user.id,
        message=message,
        file_data=file_data,
        filename=file.filename if file_data else None,
        mime_type=file.content_type if file_data else None,
    )
    return schemas.ProjectStarted(projectId=project.id)

@router.get("/{project_id}", response_model=schemas.ProjectDetail)
def read_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = services.get_project(db, project_id, current_user.id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project

@router.patch("/{project_id}", response_model=schemas.SuccessResponse)
def rename_project(
    project_id: UUID,
    payload: schemas.ProjectRename,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = services.rename_project(db, project_id, payload.name, current_user.id)
    if not updated:
        raise HTTPException(status_code=404, detail="Project not found")
    return schemas.SuccessResponse()

@router.delete("/{project_id}", response_model=schemas.SuccessResponse)
def delete_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    deleted = services.delete_project(db, project_id, current_user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Project not found")
    return schemas.SuccessResponse()
