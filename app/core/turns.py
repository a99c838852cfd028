"""Provider-neutral conversation turns submitted to the generative model."""

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class TurnRole(str, enum.Enum):
    USER = "user"
    MODEL = "model"


class FilePart(BaseModel):
    uri: str
    mime_type: str = "application/octet-stream"

    model_config = {"frozen": True}


class TextTurn(BaseModel):
    kind: Literal["text"] = "text"
    role: TurnRole
    text: str


class FileTurn(BaseModel):
    kind: Literal["file"] = "file"
    role: TurnRole = TurnRole.USER
    file: FilePart


class MixedTurn(BaseModel):
    """Text with a file attached to the same turn."""

    kind: Literal["mixed"] = "mixed"
    role: TurnRole = TurnRole.USER
    text: str
    file: FilePart


Turn = Annotated[Union[TextTurn, FileTurn, MixedTurn], Field(discriminator="kind")]
