import logging
from typing import Optional
from urllib.parse import urlencode

import requests
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.core.hashing import Hasher
from app.db.models.user import User

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

SCOPE = "openid email profile"

REQUEST_TIMEOUT = 10

USER_NOT_FOUND = "USER_NOT_FOUND"
INVALID_PASSWORD = "INVALID_PASSWORD"


class AuthenticationError(Exception):
    """Password login rejected; ``code`` is USER_NOT_FOUND or INVALID_PASSWORD."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)


# ---------------------------------------------------
# 🔑 Credentials
# ---------------------------------------------------

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def create_credentials_user(db: Session, name: str, email: str, password: str) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=Hasher.hash_password(password),
        auth_provider="credentials",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    # OAuth-only accounts cannot log in with a password
    if not user or not user.hashed_password:
        raise AuthenticationError(USER_NOT_FOUND)
    if not Hasher.verify_password(password, user.hashed_password):
        raise AuthenticationError(INVALID_PASSWORD)
    return user


# ---------------------------------------------------
# 🌐 Google OAuth
# ---------------------------------------------------

def google_oauth_configured() -> bool:
    return bool(settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET and settings.GOOGLE_REDIRECT_URI)


def get_authorization_url() -> str:
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "scope": SCOPE,
        "access_type": "online",
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTHORIZATION_URL}?{urlencode(params)}"


def exchange_code_for_token(code: str) -> dict:
    data = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "client_secret": settings.GOOGLE_CLIENT_SECRET,
        "code": code,
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "grant_type": "authorization_code",
    }

    response = requests.post(GOOGLE_TOKEN_URL, data=data, timeout=REQUEST_TIMEOUT)

    if response.status_code != 200:
        logger.error("Google token exchange failed: %s", response.text)
        raise HTTPException(status_code=400, detail="Token exchange failed")

    return response.json()


def get_user_info(access_token: str) -> dict:
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/json",
    }

    response = requests.get(GOOGLE_USERINFO_URL, headers=headers, timeout=REQUEST_TIMEOUT)

    if response.status_code != 200:
        logger.error("Google userinfo request failed: %s", response.text)
        raise HTTPException(status_code=400, detail="Failed to fetch user info")

    return response.json()


def get_or_create_oauth_user(db: Session, email: str, name: Optional[str], provider_user_id: Optional[str]) -> User:
    """First sign-in provisions the user; an existing row keeps its provider tag."""
    user = get_user_by_email(db, email)
    if user:
        return user

    user = User(
        email=email,
        name=name,
        hashed_password=None,
        auth_provider="google",
        provider_user_id=provider_user_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Provisioned Google user %s", email)
    return user
