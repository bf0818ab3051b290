import re
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from schemas.base import CamelModel

WEBSITE_PATTERN = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
)


def _check_website(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if not WEBSITE_PATTERN.match(v):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return v


class SocialLinks(CamelModel):
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


class AuthorCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    website: Optional[str] = None
    social: Optional[SocialLinks] = None
    user_id: Optional[int] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()

    @field_validator("website")
    @classmethod
    def valid_website(cls, v):
        return _check_website(v)


class AuthorUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    website: Optional[str] = None
    social: Optional[SocialLinks] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v

    @field_validator("website")
    @classmethod
    def valid_website(cls, v):
        return _check_website(v)


class AuthorResponse(CamelModel):
    id: int
    name: str
    email: str
    bio: Optional[str] = None
    avatar: Optional[str] = None
    website: Optional[str] = None
    social: SocialLinks
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthorListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[AuthorResponse]
