from datetime import datetime

from pydantic import BaseModel


class FileReferenceOut(BaseModel):
    id: int
    original_filename: str
    mime_type: str
    created_at: datetime

    model_config = {"from_attributes": True}

class FileClearResponse(BaseModel):
    success: bool = True
    deleted: int
