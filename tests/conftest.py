"""Shared fixtures: in-memory database, fake model client, authenticated users."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app as fastapi_app
from app.api.auth import services as auth_services
from app.api.projects import schemas as project_schemas
from app.api.projects import services as project_services
from app.core.exceptions import EmptyReplyError
from app.core.llm import get_llm_client
from app.core.security import create_user_token
from app.db.session import Base, get_db

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class FakeLLM:
    """Records every call and answers with canned values."""

    def __init__(self):
        self.reply = "Here is what I think."
        self.title = "Trip Planning Ideas"
        self.generate_error = None
        self.title_error = None
        self.upload_error = None
        self.generate_calls = []
        self.title_prompts = []
        self.uploads = []

    def generate(self, turns):
        self.generate_calls.append(list(turns))
        if self.generate_error:
            raise self.generate_error
        if not self.reply:
            raise EmptyReplyError("empty")
        return self.reply

    def complete_text(self, prompt, max_tokens=20):
        self.title_prompts.append(prompt)
        if self.title_error:
            raise self.title_error
        return self.title

    def upload_file(self, path, mime_type, display_name):
        with open(path, "rb") as fh:
            content = fh.read()
        self.uploads.append({
            "path": path,
            "mime_type": mime_type,
            "display_name": display_name,
            "content": content,
        })
        if self.upload_error:
            raise self.upload_error
        return f"file-{len(self.uploads)}"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(fake_llm):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_llm_client] = lambda: fake_llm
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def user(db_session):
    return auth_services.create_credentials_user(
        db_session, name="Alice", email="alice@acme.io", password="wonderland"
    )


@pytest.fixture
def other_user(db_session):
    return auth_services.create_credentials_user(
        db_session, name="Bob", email="bob@acme.io", password="builder"
    )


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def other_auth_headers(other_user):
    return {"Authorization": f"Bearer {create_user_token(other_user)}"}


@pytest.fixture
def project(db_session, user):
    return project_services.create_project(
        db_session,
        project_schemas.ProjectCreate(name="Research", description="Notes and papers"),
        user.id,
    )
