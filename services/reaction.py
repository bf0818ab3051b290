import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from database import utcnow
from models import Post, PostLike, PostReaction, PostShare, User
from models.post import REACTION_TYPES, empty_reaction_counts
from services.notification import create_notification
from utils.content import refresh_likes_count

logger = logging.getLogger(__name__)

REACTION_EMOJI = {
    "thumbsUp": "👍",
    "heart": "❤️",
    "clap": "👏",
    "wow": "😮",
    "sad": "😢",
}

PLATFORM_NAMES = {
    "facebook": "Facebook",
    "twitter": "Twitter",
    "linkedin": "LinkedIn",
    "whatsapp": "WhatsApp",
}


def _get_post_or_404(post_id: int, db: Session) -> Post:
    post = db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def _notify_author(db: Session, post: Post, actor: Optional[User], type: str, content: str, reaction_type: str = None):
    if actor is None or post.user_id == actor.id:
        return
    create_notification(
        db,
        recipient_id=post.user_id,
        sender_id=actor.id,
        type=type,
        post_id=post.id,
        content=content,
        link=f"/post/{post.id}",
        reaction_type=reaction_type,
    )


def _reaction_counts(post: Post) -> dict:
    counts = empty_reaction_counts()
    counts.update(post.reactions or {})
    return counts


def toggle_like(post_id: int, db: Session, current_user: User) -> dict:
    post = _get_post_or_404(post_id, db)

    existing = next((like for like in post.likes if like.user_id == current_user.id), None)
    if existing:
        post.likes.remove(existing)
    else:
        post.likes.append(PostLike(user_id=current_user.id))
        _notify_author(db, post, current_user, "like", f'{current_user.name} liked your post "{post.title}"')

    refresh_likes_count(post)
    db.commit()
    db.refresh(post)

    return {
        "likes": post.likes,
        "likes_count": post.likes_count,
        "user_liked": existing is None,
    }


def react_to_post(post_id: int, reaction_type: str, db: Session, current_user: User) -> dict:
    """Adds, removes or switches the current user's reaction on a post.

    Reacting with the kind already held removes it. Reacting with a different
    kind moves the user's counter from the old kind to the new one.
    """
    if reaction_type not in REACTION_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid reaction type")

    post = _get_post_or_404(post_id, db)
    counts = _reaction_counts(post)
    existing = next((r for r in post.user_reactions if r.user_id == current_user.id), None)
    emoji = REACTION_EMOJI[reaction_type]

    if existing is None:
        post.user_reactions.append(PostReaction(user_id=current_user.id, type=reaction_type))
        counts[reaction_type] += 1
        held = reaction_type
        _notify_author(
            db, post, current_user, "reaction",
            f'{current_user.name} reacted with {emoji} to your post "{post.title}"',
            reaction_type=reaction_type,
        )
    elif existing.type == reaction_type:
        post.user_reactions.remove(existing)
        counts[reaction_type] = max(0, counts[reaction_type] - 1)
        held = None
    else:
        counts[existing.type] = max(0, counts.get(existing.type, 0) - 1)
        counts[reaction_type] += 1
        existing.type = reaction_type
        existing.created_at = utcnow()
        held = reaction_type
        _notify_author(
            db, post, current_user, "reaction",
            f'{current_user.name} changed their reaction to {emoji} on your post "{post.title}"',
            reaction_type=reaction_type,
        )

    # JSON columns only track reassignment
    post.reactions = counts
    db.commit()

    return {"reactions": counts, "user_reaction": held}


def get_post_reactions(post_id: int, db: Session, current_user: Optional[User]) -> dict:
    post = _get_post_or_404(post_id, db)

    user_reaction = None
    user_liked = False
    if current_user is not None:
        held = next((r for r in post.user_reactions if r.user_id == current_user.id), None)
        user_reaction = held.type if held else None
        user_liked = any(like.user_id == current_user.id for like in post.likes)

    return {
        "reactions": _reaction_counts(post),
        "likes_count": post.likes_count,
        "user_reaction": user_reaction,
        "user_liked": user_liked,
    }


def track_share(post_id: int, platform: str, db: Session, current_user: Optional[User]) -> dict:
    post = _get_post_or_404(post_id, db)

    post.share_count = (post.share_count or 0) + 1
    post.shares.append(PostShare(platform=platform))

    if current_user is not None:
        platform_name = PLATFORM_NAMES.get(platform, "other platforms")
        _notify_author(db, post, current_user, "share", f'{current_user.name} shared your post "{post.title}" on {platform_name}')

    db.commit()
    logger.info("Post %s shared on %s", post.id, platform)
    return {"share_count": post.share_count}


def get_share_stats(post_id: int, db: Session) -> dict:
    post = _get_post_or_404(post_id, db)

    platforms = {}
    for share in post.shares:
        platforms[share.platform] = platforms.get(share.platform, 0) + 1

    return {"share_count": post.share_count, "platforms": platforms}
