"""Tests for chat orchestration against a real (in-memory) database."""

import pytest

from app.api.chat import services
from app.api.chat.context import SYSTEM_INSTRUCTION_PREFIX
from app.api.files import services as file_services
from app.core.exceptions import ProjectNotFoundError, UpstreamServiceError
from app.core.turns import FileTurn, MixedTurn, TextTurn, TurnRole
from app.db.models.chat.chat_message import ChatMessage
from app.db.models.chat.chat_session import ChatSession


def all_messages(db, session_id):
    return db.query(ChatMessage)\
             .filter(ChatMessage.chat_session_id == session_id)\
             .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())\
             .all()


@pytest.mark.unit
class TestChatSessions:
    """Test cases for session resolution."""

    def test_session_created_lazily(self, db_session, project, user):
        assert services.get_chat_session(db_session, project.id, user.id) is None

        created = services.get_or_create_chat_session(db_session, project.id, user.id)
        again = services.get_or_create_chat_session(db_session, project.id, user.id)

        assert created.id == again.id
        assert db_session.query(ChatSession).count() == 1

    def test_concurrent_creation_reuses_winner(self, db_session, project, user, monkeypatch):
        """A lost insert race falls back to the row the other request created."""
        winner = ChatSession(project_id=project.id, user_id=user.id)
        db_session.add(winner)
        db_session.commit()
        winner_id = winner.id

        real_lookup = services.get_chat_session
        calls = []

        def stale_then_real(db, project_id, user_id):
            calls.append(project_id)
            if len(calls) == 1:
                return None  # this request looked before the winner committed
            return real_lookup(db, project_id, user_id)

        monkeypatch.setattr(services, "get_chat_session", stale_then_real)

        chat_session = services.get_or_create_chat_session(db_session, project.id, user.id)

        assert chat_session.id == winner_id
        assert len(calls) == 2
        assert db_session.query(ChatSession).count() == 1


@pytest.mark.unit
class TestSendMessage:
    """Test cases for send_message."""

    def test_persists_user_and_assistant_pair(self, db_session, project, user, fake_llm):
        reply = services.send_message(db_session, fake_llm, project.id, user.id, "Hello there")

        assert reply == fake_llm.reply
        chat_session = services.get_chat_session(db_session, project.id, user.id)
        messages = all_messages(db_session, chat_session.id)
        assert [(m.role, m.content) for m in messages] == [
            ("user", "Hello there"),
            ("assistant", fake_llm.reply),
        ]
        assert {m.chat_session_id for m in messages} == {chat_session.id}

    def test_context_contains_system_prompt_and_message(self, db_session, project, user, fake_llm):
        services.send_message(db_session, fake_llm, project.id, user.id, "Hi")

        turns = fake_llm.generate_calls[0]
        assert turns[0].text == f"{SYSTEM_INSTRUCTION_PREFIX}{project.system_prompt}"
        assert turns[-1] == TextTurn(role=TurnRole.USER, text="Hi")

    def test_history_is_bounded_and_ascending(self, db_session, project, user, fake_llm):
        for i in range(6):
            fake_llm.reply = f"answer {i}"
            services.send_message(db_session, fake_llm, project.id, user.id, f"question {i}")

        services.send_message(db_session, fake_llm, project.id, user.id, "final question")

        history = fake_llm.generate_calls[-1][1:-1]
        assert len(history) == 10
        assert history[0] == TextTurn(role=TurnRole.USER, text="question 1")
        assert history[1] == TextTurn(role=TurnRole.MODEL, text="answer 1")
        assert history[-1] == TextTurn(role=TurnRole.MODEL, text="answer 5")

    def test_model_failure_writes_nothing(self, db_session, project, user, fake_llm):
        fake_llm.generate_error = UpstreamServiceError("boom")

        with pytest.raises(UpstreamServiceError):
            services.send_message(db_session, fake_llm, project.id, user.id, "Hello")

        assert db_session.query(ChatMessage).count() == 0

    def test_empty_reply_uses_fallback(self, db_session, project, user, fake_llm):
        fake_llm.reply = ""

        reply = services.send_message(db_session, fake_llm, project.id, user.id, "Hello")

        assert reply == services.FALLBACK_REPLY
        assert db_session.query(ChatMessage).filter(ChatMessage.role == "assistant").one().content == services.FALLBACK_REPLY

    def test_rejects_project_owned_by_someone_else(self, db_session, project, other_user, fake_llm):
        with pytest.raises(ProjectNotFoundError):
            services.send_message(db_session, fake_llm, project.id, other_user.id, "Hello")

        assert fake_llm.generate_calls == []
        assert db_session.query(ChatSession).count() == 0

    def test_current_file_not_duplicated(self, db_session, project, user, fake_llm):
        older = file_services.add_file_reference(db_session, project.id, "file-old", "old.pdf", "application/pdf")
        current = file_services.add_file_reference(db_session, project.id, "file-new", "new.pdf", "application/pdf")

        services.send_message(db_session, fake_llm, project.id, user.id, "Compare them", current_file=current)

        turns = fake_llm.generate_calls[0]
        assert [t.file.uri for t in turns if isinstance(t, FileTurn)] == [older.file_uri]
        assert isinstance(turns[-1], MixedTurn)
        assert turns[-1].file.uri == "file-new"
        assert turns[-1].text == "Compare them"


@pytest.mark.unit
class TestListMessages:
    """Test cases for history reads."""

    def test_only_callers_session(self, db_session, project, user, other_user, fake_llm):
        services.send_message(db_session, fake_llm, project.id, user.id, "mine")

        assert len(services.list_messages(db_session, project.id, user.id)) == 2
        assert services.list_messages(db_session, project.id, other_user.id) == []

    def test_persist_user_message_only(self, db_session, project, user):
        message = services.persist_user_message_only(db_session, project.id, user.id, "just me")

        assert message.role == "user"
        assert [m.content for m in services.list_messages(db_session, project.id, user.id)] == ["just me"]
