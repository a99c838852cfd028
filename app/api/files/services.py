# app/api/files/services.py

import logging
import os
import tempfile
import time
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import UnsupportedFileTypeError
from app.core.llm import LLMClient, is_supported_file_type
from app.db.models.project_file import ProjectFileReference

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


# ---------------------------------------------------
# ☁️ File Relay
# ---------------------------------------------------

def _staging_path(filename: str) -> str:
    tmp_dir = settings.UPLOAD_TMP_DIR or tempfile.gettempdir()
    safe_name = os.path.basename(filename) or "upload"
    return os.path.join(tmp_dir, f"{time.time_ns()}-{safe_name}")


def stage_and_upload(llm: LLMClient, data: bytes, filename: str, mime_type: Optional[str]) -> str:
    """
    Relay uploaded bytes to the model provider's file host.

    The bytes are staged under a timestamp-prefixed name in the temp dir
    because the SDK uploads from disk. The staged copy is removed whether
    or not the upload succeeds; upload errors propagate to the caller.
    """
    path = _staging_path(filename)
    try:
        with open(path, "wb") as fh:
            fh.write(data)
        return llm.upload_file(path, mime_type or DEFAULT_MIME_TYPE, os.path.basename(filename) or "upload")
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("Failed to delete staged upload %s", path)


# ---------------------------------------------------
# 💾 File References
# ---------------------------------------------------

def ensure_supported_file_type(mime_type: Optional[str]) -> None:
    if not is_supported_file_type(mime_type):
        raise UnsupportedFileTypeError(mime_type)


def add_file_reference(db: Session, project_id: UUID, file_uri: str, filename: str, mime_type: Optional[str]) -> ProjectFileReference:
    file_ref = ProjectFileReference(
        project_id=project_id,
        file_uri=file_uri,
        original_filename=filename,
        mime_type=mime_type or DEFAULT_MIME_TYPE,
    )
    db.add(file_ref)
    db.commit()
    db.refresh(file_ref)
    return file_ref


def upload_project_file(
    db: Session,
    llm: LLMClient,
    project_id: UUID,
    data: bytes,
    filename: str,
    mime_type: Optional[str],
) -> ProjectFileReference:
    """Relay a file and record its reference; no row is written if the relay fails."""
    ensure_supported_file_type(mime_type)
    file_uri = stage_and_upload(llm, data, filename, mime_type)
    file_ref = add_file_reference(db, project_id, file_uri, filename, mime_type)
    logger.info("Recorded file %s (%s) for project %s", file_ref.original_filename, file_uri, project_id)
    return file_ref


def get_files(db: Session, project_id: UUID) -> list[ProjectFileReference]:
    return db.query(ProjectFileReference)\
             .filter(ProjectFileReference.project_id == project_id)\
             .order_by(ProjectFileReference.created_at.asc(), ProjectFileReference.id.asc())\
             .all()


def get_latest_file(db: Session, project_id: UUID) -> Optional[ProjectFileReference]:
    return db.query(ProjectFileReference)\
             .filter(ProjectFileReference.project_id == project_id)\
             .order_by(ProjectFileReference.created_at.desc(), ProjectFileReference.id.desc())\
             .first()


def clear_files(db: Session, project_id: UUID) -> int:
    deleted = db.query(ProjectFileReference)\
                .filter(ProjectFileReference.project_id == project_id)\
                .delete(synchronize_session=False)
    db.commit()
    return deleted
