from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, StringConstraints


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Project name is required")
    return value


ProjectName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, max_length=255),
    AfterValidator(_strip_required),
]


class ProjectCreate(BaseModel):
    name: ProjectName
    description: Optional[str] = ""

class ProjectRename(BaseModel):
    name: ProjectName

class ProjectCreated(BaseModel):
    id: UUID
    name: str

    model_config = {"from_attributes": True}

class ProjectSummary(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}

class ProjectDetail(ProjectSummary):
    system_prompt: str
    created_at: datetime

class ProjectStarted(BaseModel):
    projectId: UUID

class SuccessResponse(BaseModel):
    success: bool = True
