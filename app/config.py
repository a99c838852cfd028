from typing import Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ENV: str = "local"  # Environment setting
    LOG_LEVEL: str = "INFO"

    # Google OAuth settings
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_REDIRECT_URI: Optional[str] = None

    # Open-AI Key
    OPENAI_API_KEY: str
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TITLE_MODEL: Optional[str] = None

    # Chat behaviour
    MAX_HISTORY_MESSAGES: int = 10
    DEFAULT_SYSTEM_PROMPT: str = "You are a helpful assistant."
    DEFAULT_PROJECT_NAME: str = "New Project"
    UPLOAD_TMP_DIR: Optional[str] = None

    class Config:
        env_file = ".env"

settings = Settings()
