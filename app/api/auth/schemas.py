from typing import Annotated, Optional
from pydantic import BaseModel, EmailStr, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

class UserCreate(BaseModel):
    name: NonEmptyStr
    email: EmailStr
    password: Annotated[str, StringConstraints(min_length=1)]

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class SignupResponse(BaseModel):
    success: bool = True

class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    auth_provider: str

    model_config = {"from_attributes": True}
