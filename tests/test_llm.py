"""Tests for the OpenAI client wrapper and message rendering."""

from unittest.mock import MagicMock

import openai
import pytest

from app.core.exceptions import EmptyReplyError, UpstreamServiceError
from app.core.llm import LLMClient, is_supported_file_type, render_messages
from app.core.turns import FilePart, FileTurn, MixedTurn, TextTurn, TurnRole


def completion(content):
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


@pytest.fixture
def openai_client():
    return MagicMock()


@pytest.fixture
def llm(openai_client):
    return LLMClient(api_key="sk-test", model="gpt-test", client=openai_client)


@pytest.mark.unit
class TestRenderMessages:
    """Test cases for render_messages."""

    def test_text_turns(self):
        messages = render_messages([
            TextTurn(role=TurnRole.USER, text="hi"),
            TextTurn(role=TurnRole.MODEL, text="hello"),
        ])

        assert messages == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_file_turn(self):
        messages = render_messages([FileTurn(file=FilePart(uri="file-1", mime_type="application/pdf"))])

        assert messages == [
            {"role": "user", "content": [{"type": "file", "file": {"file_id": "file-1"}}]}
        ]

    def test_mixed_turn(self):
        pdf = FilePart(uri="file-2", mime_type="application/pdf")
        messages = render_messages([MixedTurn(text="read this", file=pdf)])

        assert messages[0]["role"] == "user"
        assert messages[0]["content"] == [
            {"type": "text", "text": "read this"},
            {"type": "file", "file": {"file_id": "file-2"}},
        ]

    def test_unsupported_file_turn_is_dropped(self):
        messages = render_messages([
            FileTurn(file=FilePart(uri="file-1", mime_type="image/png")),
            FileTurn(file=FilePart(uri="file-2", mime_type="application/pdf")),
        ])

        assert messages == [
            {"role": "user", "content": [{"type": "file", "file": {"file_id": "file-2"}}]}
        ]

    def test_unsupported_mixed_turn_keeps_text(self):
        png = FilePart(uri="file-3", mime_type="image/png")
        messages = render_messages([MixedTurn(text="what is this?", file=png)])

        assert messages == [
            {"role": "user", "content": [{"type": "text", "text": "what is this?"}]}
        ]

    @pytest.mark.parametrize("mime_type, supported", [
        ("application/pdf", True),
        ("Application/PDF; charset=binary", True),
        ("image/png", False),
        ("text/plain", False),
        ("application/octet-stream", False),
        (None, False),
        ("", False),
    ])
    def test_is_supported_file_type(self, mime_type, supported):
        assert is_supported_file_type(mime_type) is supported


@pytest.mark.unit
class TestLLMClient:
    """Test cases for LLMClient."""

    def test_title_model_defaults_to_chat_model(self, llm):
        assert llm.title_model == "gpt-test"

    def test_generate_returns_reply(self, llm, openai_client):
        openai_client.chat.completions.create.return_value = completion("Sure thing")

        reply = llm.generate([TextTurn(role=TurnRole.USER, text="hi")])

        assert reply == "Sure thing"
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_generate_empty_reply(self, llm, openai_client, content):
        openai_client.chat.completions.create.return_value = completion(content)

        with pytest.raises(EmptyReplyError):
            llm.generate([TextTurn(role=TurnRole.USER, text="hi")])

    def test_generate_no_choices(self, llm, openai_client):
        response = MagicMock()
        response.choices = []
        openai_client.chat.completions.create.return_value = response

        with pytest.raises(EmptyReplyError):
            llm.generate([TextTurn(role=TurnRole.USER, text="hi")])

    def test_generate_wraps_sdk_errors(self, llm, openai_client):
        openai_client.chat.completions.create.side_effect = openai.OpenAIError("quota exceeded")

        with pytest.raises(UpstreamServiceError) as exc_info:
            llm.generate([TextTurn(role=TurnRole.USER, text="hi")])

        assert isinstance(exc_info.value.__cause__, openai.OpenAIError)
        assert exc_info.value.public_message == "Upstream service failure"

    def test_complete_text_uses_title_model(self, openai_client):
        llm = LLMClient(api_key="sk-test", model="gpt-test", title_model="gpt-small", client=openai_client)
        openai_client.chat.completions.create.return_value = completion("Trip Plan")

        assert llm.complete_text("name this") == "Trip Plan"
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-small"
        assert kwargs["max_tokens"] == 20

    def test_upload_file(self, llm, openai_client, tmp_path):
        path = tmp_path / "staged-notes.pdf"
        path.write_bytes(b"%PDF-1.4")
        openai_client.files.create.return_value = MagicMock(id="file-abc")

        file_id = llm.upload_file(str(path), "application/pdf", "notes.pdf")

        assert file_id == "file-abc"
        kwargs = openai_client.files.create.call_args.kwargs
        assert kwargs["purpose"] == "user_data"
        name, _, mime_type = kwargs["file"]
        assert name == "notes.pdf"
        assert mime_type == "application/pdf"

    def test_upload_file_wraps_sdk_errors(self, llm, openai_client, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        openai_client.files.create.side_effect = openai.OpenAIError("file host down")

        with pytest.raises(UpstreamServiceError):
            llm.upload_file(str(path), "text/plain", "notes.txt")
