"""Assembles the ordered turns for one model invocation."""

from typing import Iterable, Optional, Sequence

from app.core.turns import FilePart, FileTurn, MixedTurn, TextTurn, Turn, TurnRole
from app.db.models.chat.chat_message import ChatMessage
from app.db.models.project_file import ProjectFileReference

SYSTEM_INSTRUCTION_PREFIX = "System Instruction: "
DEFAULT_MAX_HISTORY = 10


def file_part(file_ref: ProjectFileReference) -> FilePart:
    return FilePart(
        uri=file_ref.file_uri,
        mime_type=file_ref.mime_type or "application/octet-stream",
    )


def history_turn(message: ChatMessage) -> TextTurn:
    role = TurnRole.MODEL if message.role == "assistant" else TurnRole.USER
    return TextTurn(role=role, text=message.content)


def build_context(
    system_prompt: str,
    history: Sequence[ChatMessage],
    file_refs: Iterable[ProjectFileReference],
    message: str,
    current_file: Optional[FilePart] = None,
    max_history: int = DEFAULT_MAX_HISTORY,
) -> list[Turn]:
    """
    Build the conversation sent to the model.

    Order: system instruction, the last ``max_history`` messages of
    ``history`` (expected oldest-first), one turn per project file other
    than ``current_file``, then the new message with ``current_file``
    attached when present. Older history is dropped, never summarized.
    """
    # The system instruction rides in a user turn; the model side only
    # knows user and model roles.
    turns: list[Turn] = [
        TextTurn(role=TurnRole.USER, text=f"{SYSTEM_INSTRUCTION_PREFIX}{system_prompt}")
    ]

    window = list(history)[-max_history:] if max_history > 0 else []
    turns.extend(history_turn(m) for m in window)

    for ref in file_refs:
        if current_file is not None and ref.file_uri == current_file.uri:
            continue
        turns.append(FileTurn(role=TurnRole.USER, file=file_part(ref)))

    if current_file is not None:
        turns.append(MixedTurn(role=TurnRole.USER, text=message, file=current_file))
    else:
        turns.append(TextTurn(role=TurnRole.USER, text=message))

    return turns
