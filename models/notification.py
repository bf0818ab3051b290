from typing import Literal, get_args

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Boolean, Text, Index
from sqlalchemy.orm import relationship

from database import Base, utcnow

NotificationType = Literal["comment", "reply", "mention", "like", "reaction", "share", "follow", "system"]
NOTIFICATION_TYPES = get_args(NotificationType)


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_recipient_created", "recipient_id", "created_at"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    type = Column(String(20), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=True)
    comment_id = Column(Integer, ForeignKey("comments.id"), nullable=True)
    content = Column(Text, nullable=False)
    link = Column(String(500), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    reaction_type = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    recipient = relationship("User", foreign_keys=[recipient_id])
    sender = relationship("User", foreign_keys=[sender_id])
    post = relationship("Post")
    comment = relationship("Comment")
