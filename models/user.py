from typing import Literal

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

import config
from database import Base, utcnow

Role = Literal["user", "author", "admin"]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default="user")
    google_id = Column(String, unique=True, nullable=True)
    bio = Column(String(500), nullable=True)
    avatar = Column(String(500), nullable=True, default=config.DEFAULT_USER_AVATAR)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    posts = relationship("Post", back_populates="author")
    comments = relationship("Comment", back_populates="author")
    author_profile = relationship("Author", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
