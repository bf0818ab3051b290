from sqlalchemy import Column, Integer, Boolean, Text, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from database import Base, utcnow


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    content = Column(Text, nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_approved = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Self-referential relationship for replies
    parent_id = Column(Integer, ForeignKey("comments.id"), nullable=True, index=True)
    parent = relationship("Comment", remote_side=[id], back_populates="replies")
    replies = relationship("Comment", back_populates="parent", order_by="Comment.created_at")

    author = relationship("User", back_populates="comments")
    post = relationship("Post", back_populates="comments")
