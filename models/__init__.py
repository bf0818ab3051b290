from .user import User
from .author import Author
from .post import Post, PostTag, PostLike, PostReaction, PostShare
from .comment import Comment
from .notification import Notification

__all__ = ["User", "Author", "Post", "PostTag", "PostLike", "PostReaction", "PostShare", "Comment", "Notification"]
