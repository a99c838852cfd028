"""Domain errors raised by services and translated at the HTTP boundary."""

from typing import Optional


class ProjectNotFoundError(Exception):
    """The project does not exist or is not owned by the caller."""

    def __init__(self, project_id):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class UpstreamServiceError(Exception):
    """The model provider or its file host failed.

    The original exception is chained as ``__cause__`` and only ever logged;
    clients get ``public_message``.
    """

    public_message = "Upstream service failure"

    def __init__(self, message: str, public_message: Optional[str] = None):
        super().__init__(message)
        if public_message:
            self.public_message = public_message


class EmptyReplyError(UpstreamServiceError):
    """The model answered but produced no usable text."""


class UnsupportedFileTypeError(ValueError):
    """The model provider cannot read files of this MIME type."""

    def __init__(self, mime_type: Optional[str]):
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type}")
