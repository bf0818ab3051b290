from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from models.post import Category, PostStatus, SharePlatform
from schemas.base import CamelModel, UserSummary
from utils.content import normalize_tags


# ---------- Requests ----------
class PostCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=100)
    content: str = Field(..., min_length=5)
    excerpt: str = Field(..., min_length=1, max_length=200)
    category: Category
    tags: List[str] = []
    status: PostStatus = "published"
    cover_image: Optional[str] = None

    @field_validator("title", "excerpt", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        return normalize_tags(v)


class PostUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    content: Optional[str] = Field(None, min_length=5)
    excerpt: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[Category] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    cover_image: Optional[str] = None

    @field_validator("title", "excerpt", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        if v is None:
            return None
        return normalize_tags(v)


class ReactionRequest(CamelModel):
    type: str


class ShareRequest(CamelModel):
    platform: SharePlatform = "other"


# ---------- Responses ----------
class AuthorDetail(UserSummary):
    bio: Optional[str] = None


class LikeEntry(CamelModel):
    user_id: int
    created_at: Optional[datetime] = None


class ReactionEntry(CamelModel):
    user_id: int
    type: str
    created_at: Optional[datetime] = None


class ShareEntry(CamelModel):
    platform: str
    created_at: Optional[datetime] = None


class PostSummary(CamelModel):
    id: int
    title: str
    excerpt: str
    content: str
    cover_image: Optional[str] = None
    category: str
    tags: List[str] = []
    status: str
    read_time: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: UserSummary

    @field_validator("tags", mode="before")
    @classmethod
    def tags_to_list(cls, v):
        if v is None:
            return []
        return list(v)


class PostResponse(PostSummary):
    author: AuthorDetail
    likes: List[LikeEntry] = []
    likes_count: int = 0
    reactions: Dict[str, int] = {}
    user_reactions: List[ReactionEntry] = []
    share_count: int = 0
    shares: List[ShareEntry] = []


class PostListResponse(CamelModel):
    success: bool = True
    data: List[PostSummary]
    total: int
    page: int
    limit: int
    pages: int
    suggestions: List[str] = []


class PostsByAuthorResponse(CamelModel):
    success: bool = True
    count: int
    data: List[PostSummary]


class LikeResult(CamelModel):
    likes: List[LikeEntry]
    likes_count: int
    user_liked: bool


class ReactionResult(CamelModel):
    reactions: Dict[str, int]
    user_reaction: Optional[str] = None


class ReactionSummary(CamelModel):
    reactions: Dict[str, int]
    likes_count: int
    user_reaction: Optional[str] = None
    user_liked: bool = False


class ShareResult(CamelModel):
    share_count: int


class ShareStats(CamelModel):
    share_count: int
    platforms: Dict[str, int]
