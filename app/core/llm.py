"""OpenAI-backed model and file-host client."""

import logging
from functools import lru_cache
from typing import Optional, Sequence

import openai
from openai import OpenAI

from app.config import settings
from app.core.exceptions import EmptyReplyError, UpstreamServiceError
from app.core.turns import FilePart, FileTurn, MixedTurn, TextTurn, Turn, TurnRole

logger = logging.getLogger(__name__)

# OpenAI calls the model side of a conversation "assistant"
ROLE_MAP = {
    TurnRole.USER: "user",
    TurnRole.MODEL: "assistant",
}

# Chat completion file parts only accept PDFs
SUPPORTED_FILE_MIME_TYPES = frozenset({"application/pdf"})


def is_supported_file_type(mime_type: Optional[str]) -> bool:
    if not mime_type:
        return False
    return mime_type.split(";", 1)[0].strip().lower() in SUPPORTED_FILE_MIME_TYPES


def _file_content(file: FilePart) -> Optional[dict]:
    if not is_supported_file_type(file.mime_type):
        logger.warning("Leaving out file %s with unsupported type %s", file.uri, file.mime_type)
        return None
    return {"type": "file", "file": {"file_id": file.uri}}


def render_messages(turns: Sequence[Turn]) -> list[dict]:
    """Convert provider-neutral turns into chat completion messages.

    File parts the provider cannot read are dropped: a lone file turn
    disappears and a mixed turn keeps only its text.
    """
    messages = []
    for turn in turns:
        role = ROLE_MAP[turn.role]
        if isinstance(turn, TextTurn):
            messages.append({"role": role, "content": turn.text})
        elif isinstance(turn, FileTurn):
            file_content = _file_content(turn.file)
            if file_content:
                messages.append({"role": role, "content": [file_content]})
        elif isinstance(turn, MixedTurn):
            content = [{"type": "text", "text": turn.text}]
            file_content = _file_content(turn.file)
            if file_content:
                content.append(file_content)
            messages.append({"role": role, "content": content})
        else:
            raise TypeError(f"Unsupported turn type: {type(turn).__name__}")
    return messages


class LLMClient:
    """Thin wrapper over the OpenAI SDK.

    No retries happen here; SDK or network errors surface as
    UpstreamServiceError with the original exception chained.
    """

    def __init__(self, api_key: str, model: str, title_model: Optional[str] = None, client: Optional[OpenAI] = None):
        self.model = model
        self.title_model = title_model or model
        self.client = client or OpenAI(api_key=api_key)

    def _complete(self, model: str, messages: list[dict], **kwargs) -> str:
        try:
            response = self.client.chat.completions.create(model=model, messages=messages, **kwargs)
        except openai.OpenAIError as e:
            raise UpstreamServiceError(f"OpenAI completion failed: {e}") from e

        content = None
        if response.choices:
            content = response.choices[0].message.content
        if not content or not content.strip():
            raise EmptyReplyError("OpenAI returned no usable text")
        return content

    def generate(self, turns: Sequence[Turn]) -> str:
        """Send an assembled conversation and return the reply text."""
        messages = render_messages(turns)
        logger.info("Sending %d turns to %s", len(messages), self.model)
        return self._complete(self.model, messages)

    def complete_text(self, prompt: str, max_tokens: int = 20) -> str:
        """Single-shot prompt, used for short utility generations like titles."""
        return self._complete(
            self.title_model,
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=0.4,
        )

    def upload_file(self, path: str, mime_type: str, display_name: str) -> str:
        """Upload a local file to the provider and return its file id."""
        try:
            with open(path, "rb") as fh:
                uploaded = self.client.files.create(
                    file=(display_name, fh, mime_type),
                    purpose="user_data",
                )
        except openai.OpenAIError as e:
            raise UpstreamServiceError(f"OpenAI file upload failed: {e}") from e

        logger.info("File uploaded to OpenAI: %s (%s)", uploaded.id, display_name)
        return uploaded.id


@lru_cache(maxsize=1)
def get_llm_client() -> LLMClient:
    return LLMClient(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        title_model=settings.OPENAI_TITLE_MODEL,
    )
