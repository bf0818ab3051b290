from typing import Literal, get_args

from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, JSON, UniqueConstraint
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

import config
from database import Base, utcnow

Category = Literal[
    "Microcontrollers",
    "Programming",
    "Robotics",
    "Artificial Intelligence",
    "IoT",
    "Hardware",
    "Software",
    "Other",
]

PostStatus = Literal["draft", "published"]

ReactionType = Literal["thumbsUp", "heart", "clap", "wow", "sad"]
REACTION_TYPES = get_args(ReactionType)

SharePlatform = Literal["facebook", "twitter", "linkedin", "whatsapp", "other"]


def empty_reaction_counts() -> dict:
    return {reaction: 0 for reaction in REACTION_TYPES}


class PostTag(Base):
    __tablename__ = "post_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False, index=True)


class PostLike(Base):
    __tablename__ = "post_likes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class PostReaction(Base):
    __tablename__ = "post_reactions"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_reactions_post_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class PostShare(Base):
    __tablename__ = "post_shares"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(200), nullable=False)
    cover_image = Column(String(500), nullable=True, default=config.DEFAULT_POST_COVER)
    category = Column(String(50), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="published")
    read_time = Column(Integer, nullable=False, default=1)
    likes_count = Column(Integer, nullable=False, default=0)
    reactions = Column(JSON, nullable=False, default=empty_reaction_counts)
    share_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    author = relationship("User", back_populates="posts")
    tag_links = relationship("PostTag", cascade="all, delete-orphan", order_by="PostTag.id")
    tags = association_proxy("tag_links", "name", creator=lambda name: PostTag(name=name))
    likes = relationship("PostLike", cascade="all, delete-orphan", order_by="PostLike.id")
    user_reactions = relationship("PostReaction", cascade="all, delete-orphan", order_by="PostReaction.id")
    shares = relationship("PostShare", cascade="all, delete-orphan", order_by="PostShare.id")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
