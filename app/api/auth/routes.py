import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.api.auth import schemas, services
from app.core.security import create_user_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=schemas.SignupResponse)
def signup(user: schemas.UserCreate, db: Session = Depends(get_db)):
    if services.get_user_by_email(db, user.email):
        raise HTTPException(status_code=409, detail="User already exists")

    try:
        services.create_credentials_user(db, name=user.name, email=user.email, password=user.password)
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.rollback()
        raise HTTPException(status_code=409, detail="User already exists")

    return schemas.SignupResponse()


@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    try:
        user = services.authenticate_user(db, credentials.email, credentials.password)
    except services.AuthenticationError as e:
        logger.warning("Login rejected for %s: %s", credentials.email, e.code)
        raise HTTPException(status_code=401, detail=e.code)

    return schemas.Token(access_token=create_user_token(user))


@router.get("/me", response_model=schemas.UserOut)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/google/login")
def login_with_google():
    if not services.google_oauth_configured():
        raise HTTPException(status_code=503, detail="Google sign-in is not configured")
    return RedirectResponse(services.get_authorization_url())


@router.get("/google/callback", response_model=schemas.Token)
def google_callback(code: str, db: Session = Depends(get_db)):
    if not services.google_oauth_configured():
        raise HTTPException(status_code=503, detail="Google sign-in is not configured")

    # Step 1: Exchange code for token
    token_data = services.exchange_code_for_token(code)

    # Step 2: Use access token to get user info
    user_info = services.get_user_info(token_data["access_token"])
    email = user_info.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="Google account has no email")

    # Step 3: Provision on first sign-in
    user = services.get_or_create_oauth_user(
        db,
        email=email,
        name=user_info.get("name"),
        provider_user_id=user_info.get("sub"),
    )

    # Step 4: Issue your app's token
    return schemas.Token(access_token=create_user_token(user))
