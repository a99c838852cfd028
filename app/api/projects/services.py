from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import ProjectNotFoundError
from app.db.models.project import Project
from . import schemas

def create_project(db: Session, project: schemas.ProjectCreate, user_id: int) -> Project:
    db_project = Project(
        name=project.name,
        description=project.description or "",
        system_prompt=settings.DEFAULT_SYSTEM_PROMPT,
        user_id=user_id,
    )
    db.add(db_project)
    db.commit()
    db.refresh(db_project)
    return db_project

def get_projects(db: Session, user_id: int) -> list[Project]:
    return db.query(Project)\
             .filter(Project.user_id == user_id)\
             .order_by(Project.created_at.desc())\
             .all()

def get_project(db: Session, project_id: UUID, user_id: int) -> Optional[Project]:
    return db.query(Project).filter(Project.id == project_id, Project.user_id == user_id).first()

def get_project_or_raise(db: Session, project_id: UUID, user_id: int) -> Project:
    project = get_project(db, project_id, user_id)
    if not project:
        raise ProjectNotFoundError(project_id)
    return project

def rename_project(db: Session, project_id: UUID, new_name: str, user_id: int) -> Optional[Project]:
    db_project = get_project(db, project_id, user_id)
    if db_project:
        db_project.name = new_name
        db.commit()
        db.refresh(db_project)
    return db_project

def delete_project(db: Session, project_id: UUID, user_id: int) -> Optional[Project]:
    db_project = get_project(db, project_id, user_id)
    if db_project:
        db.delete(db_project)
        db.commit()
    return db_project
