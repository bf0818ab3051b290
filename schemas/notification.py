from datetime import datetime
from typing import List, Optional

from schemas.base import CamelModel, Pagination, UserSummary


class NotificationPost(CamelModel):
    id: int
    title: str


class NotificationComment(CamelModel):
    id: int
    content: str


class NotificationResponse(CamelModel):
    id: int
    recipient_id: int
    sender: Optional[UserSummary] = None
    type: str
    post: Optional[NotificationPost] = None
    comment: Optional[NotificationComment] = None
    content: str
    link: Optional[str] = None
    read: bool
    reaction_type: Optional[str] = None
    created_at: Optional[datetime] = None


class NotificationListData(CamelModel):
    notifications: List[NotificationResponse]
    unread_count: int
    pagination: Pagination


class UnreadCount(CamelModel):
    count: int
