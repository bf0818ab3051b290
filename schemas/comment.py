from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from schemas.base import CamelModel, Pagination, UserSummary


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=1000)
    parent_comment: Optional[int] = None

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class CommentUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class CommentApproval(CamelModel):
    is_approved: bool


class ReplyResponse(CamelModel):
    id: int
    content: str
    post_id: int
    author: UserSummary
    is_approved: bool
    parent_comment: Optional[int] = Field(None, validation_alias="parent_id", serialization_alias="parentComment")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentResponse(ReplyResponse):
    replies: List[ReplyResponse] = []


class CommentListData(CamelModel):
    comments: List[CommentResponse]
    pagination: Pagination
