from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from models.user import Role
from schemas.base import CamelModel


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class UserCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = "user"

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return _normalize_email(v)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return _normalize_email(v)


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: Role
    bio: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None


class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    success: bool = True
    token: str


class IdTokenSignIn(CamelModel):
    id_token: str


class AvatarData(BaseModel):
    url: str
