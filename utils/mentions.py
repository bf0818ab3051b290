import re
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Comment, Notification, Post, User
from services.notification import create_notification

MENTION_PATTERN = re.compile(r"@(\w+)")


def extract_mentions(content: str) -> List[str]:
    """Returns the distinct @name tokens in content, compared case-insensitively."""
    seen = set()
    names = []
    for name in MENTION_PATTERN.findall(content or ""):
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        names.append(name)
    return names


def process_mentions_and_notifications(
        db: Session,
        new_comment: Comment,
        post: Post,
        current_user: User
) -> List[Notification]:
    """
    Resolves @name mentions in a comment and queues a mention notification for each one.

    Args:
        db (Session): The database session.
        new_comment (Comment): The newly created comment object, already flushed.
        post (Post): The post the comment belongs to.
        current_user (User): The user who created the comment.

    Names are matched case-insensitively against the whole user name. Unknown
    names and self-mentions are skipped.
    """
    notifications = []
    for mentioned_name in extract_mentions(new_comment.content):
        mentioned_user = db.query(User).filter(func.lower(User.name) == mentioned_name.lower()).first()
        if not mentioned_user or mentioned_user.id == current_user.id:
            continue

        notifications.append(create_notification(
            db,
            recipient_id=mentioned_user.id,
            sender_id=current_user.id,
            type="mention",
            post_id=post.id,
            comment_id=new_comment.id,
            content=f'{current_user.name} mentioned you in a comment on "{post.title}"',
            link=f"/post/{post.id}#comment-{new_comment.id}",
        ))
    return notifications
