import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from models import Notification, User
from models.notification import NOTIFICATION_TYPES
from utils.pagination import build_pagination, offset_for

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    type: str,
    content: str,
    sender_id: Optional[int] = None,
    post_id: Optional[int] = None,
    comment_id: Optional[int] = None,
    link: Optional[str] = None,
    reaction_type: Optional[str] = None,
) -> Notification:
    """Queues a notification on the session; the caller's commit persists it."""
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type}")
    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type,
        post_id=post_id,
        comment_id=comment_id,
        content=content,
        link=link,
        reaction_type=reaction_type,
        read=False,
    )
    db.add(notification)
    return notification


def get_notifications(db: Session, current_user: User, page: int, limit: int, unread_only: bool) -> dict:
    query = db.query(Notification).filter(Notification.recipient_id == current_user.id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))

    total = query.count()
    notifications = (
        query.options(
            joinedload(Notification.sender),
            joinedload(Notification.post),
            joinedload(Notification.comment),
        )
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset_for(page, limit))
        .limit(limit)
        .all()
    )

    return {
        "notifications": notifications,
        "unread_count": get_unread_count(db, current_user),
        "pagination": build_pagination(page, limit, total),
    }


def get_unread_count(db: Session, current_user: User) -> int:
    return (
        db.query(Notification)
        .filter(Notification.recipient_id == current_user.id, Notification.read.is_(False))
        .count()
    )


def _get_own_notification(notification_id: int, db: Session, current_user: User) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    if notification.recipient_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return notification


def mark_as_read(notification_id: int, db: Session, current_user: User) -> Notification:
    notification = _get_own_notification(notification_id, db, current_user)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, current_user: User) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.recipient_id == current_user.id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    logger.info("Marked %s notifications as read for user %s", updated, current_user.id)
    return updated


def delete_notification(notification_id: int, db: Session, current_user: User) -> None:
    notification = _get_own_notification(notification_id, db, current_user)
    db.delete(notification)
    db.commit()
