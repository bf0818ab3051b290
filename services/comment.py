import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload, selectinload

from models import Comment, Notification, Post, User
from schemas.comment import CommentCreate, CommentUpdate
from services.notification import create_notification
from utils.mentions import process_mentions_and_notifications
from utils.pagination import build_pagination, offset_for

logger = logging.getLogger(__name__)


def _comment_query(db: Session):
    return db.query(Comment).options(
        joinedload(Comment.author),
        selectinload(Comment.replies).joinedload(Comment.author),
    )


def get_comment(comment_id: int, db: Session) -> Comment:
    comment = _comment_query(db).filter(Comment.id == comment_id).first()
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


def _get_owned_comment(comment_id: int, db: Session, current_user: User, action: str) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Not authorized to {action} this comment")
    return comment


def list_post_comments(post_id: int, db: Session, page: int, limit: int) -> dict:
    if not db.get(Post, post_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    query = db.query(Comment).filter(
        Comment.post_id == post_id,
        Comment.parent_id.is_(None),
        Comment.is_approved.is_(True),
    )
    total = query.count()
    comments = (
        query.options(
            joinedload(Comment.author),
            selectinload(Comment.replies).joinedload(Comment.author),
        )
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset(offset_for(page, limit))
        .limit(limit)
        .all()
    )
    return {"comments": comments, "pagination": build_pagination(page, limit, total)}


def create_comment(post_id: int, comment_data: CommentCreate, db: Session, current_user: User) -> Comment:
    """
    Creates a comment or a reply and queues its notifications.

    The post author is told about the comment, the parent author about the
    reply and every resolvable @name about the mention. Nobody is notified
    about their own action.
    """
    post = db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    parent = None
    if comment_data.parent_comment is not None:
        parent = db.get(Comment, comment_data.parent_comment)
        if not parent:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent comment not found")
        if parent.post_id != post.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent comment does not belong to this post",
            )

    new_comment = Comment(
        content=comment_data.content,
        post_id=post.id,
        user_id=current_user.id,
        parent_id=parent.id if parent else None,
    )
    db.add(new_comment)
    db.flush()

    link = f"/post/{post.id}#comment-{new_comment.id}"
    if post.user_id != current_user.id:
        create_notification(
            db,
            recipient_id=post.user_id,
            sender_id=current_user.id,
            type="comment",
            post_id=post.id,
            comment_id=new_comment.id,
            content=f'{current_user.name} commented on your post "{post.title}"',
            link=link,
        )

    if parent and parent.user_id != current_user.id:
        create_notification(
            db,
            recipient_id=parent.user_id,
            sender_id=current_user.id,
            type="reply",
            post_id=post.id,
            comment_id=new_comment.id,
            content=f'{current_user.name} replied to your comment on "{post.title}"',
            link=link,
        )

    process_mentions_and_notifications(db, new_comment, post, current_user)

    db.commit()
    logger.info("User %s commented on post %s", current_user.id, post.id)
    return get_comment(new_comment.id, db)


def update_comment(comment_id: int, comment_data: CommentUpdate, db: Session, current_user: User) -> Comment:
    comment = _get_owned_comment(comment_id, db, current_user, "update")
    comment.content = comment_data.content
    db.commit()
    return get_comment(comment.id, db)


def delete_comment(comment_id: int, db: Session, current_user: User) -> None:
    comment = _get_owned_comment(comment_id, db, current_user, "delete")

    doomed: List[Comment] = [comment]
    if comment.parent_id is None:
        doomed.extend(comment.replies)

    doomed_ids = [c.id for c in doomed]
    db.query(Notification).filter(Notification.comment_id.in_(doomed_ids)).delete(synchronize_session=False)

    for c in doomed:
        db.delete(c)
    db.commit()
    logger.info("User %s deleted comments %s", current_user.id, doomed_ids)


def approve_comment(comment_id: int, is_approved: bool, db: Session) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    comment.is_approved = is_approved
    db.commit()
    return get_comment(comment.id, db)
