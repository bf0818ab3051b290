from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

import config
from database import Base, utcnow


class Author(Base):
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    bio = Column(String(500), nullable=True)
    avatar = Column(String(500), nullable=True, default=config.DEFAULT_AUTHOR_AVATAR)
    website = Column(String(500), nullable=True)
    twitter = Column(String(255), nullable=True)
    facebook = Column(String(255), nullable=True)
    linkedin = Column(String(255), nullable=True)
    instagram = Column(String(255), nullable=True)
    # Account that owns this profile, used by /profile/me
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="author_profile")
    posts = relationship(
        "Post",
        primaryjoin="Author.user_id == foreign(Post.user_id)",
        viewonly=True,
        order_by="Post.created_at.desc()",
    )

    @property
    def social(self) -> dict:
        return {
            "twitter": self.twitter,
            "facebook": self.facebook,
            "linkedin": self.linkedin,
            "instagram": self.instagram,
        }
