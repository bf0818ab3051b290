import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from models import Comment, Notification, Post, PostTag, User
from schemas.post import PostCreate, PostUpdate
from services.upload import discard_image, store_image
from storage.base import BaseStorage, StorageError
from utils.content import compute_read_time
from utils.errors import parse_json_form, validate_schema, validation_failed
from utils.pagination import offset_for, page_count

logger = logging.getLogger(__name__)

REQUIRED_POST_FIELDS = ("title", "content", "excerpt", "category")
SORT_FIELDS = {
    "title": Post.title,
    "createdAt": Post.created_at,
    "readTime": Post.read_time,
    "category": Post.category,
}
MAX_SUGGESTIONS = 5
COVER_FOLDER = "posts"
LIKE_ESCAPE = "\\"


def _parse_date(value: Optional[str], field: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise validation_failed([{"field": field, "message": f"{field} must be an ISO 8601 date"}])


def _split_tags(tags: Optional[str]) -> List[str]:
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def _contains_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _tag_suggestions(db: Session, search: str, page_tags: set) -> List[str]:
    names = (
        db.query(PostTag.name)
        .filter(PostTag.name.ilike(_contains_pattern(search), escape=LIKE_ESCAPE))
        .distinct()
        .order_by(PostTag.name)
        .all()
    )
    suggestions = [name for (name,) in names if name not in page_tags]
    return suggestions[:MAX_SUGGESTIONS]


def list_posts(
    db: Session,
    page: int = 1,
    limit: int = 50,
    category: Optional[str] = None,
    tags: Optional[str] = None,
    author: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    post_status: Optional[str] = "published",
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
) -> dict:
    """Filtered, sorted and paginated post listing.

    Returns the page together with the total count and, when a search term
    is given, tag suggestions that do not already appear on the page.
    """
    query = db.query(Post)

    if post_status and post_status != "all":
        query = query.filter(Post.status == post_status)
    if category:
        query = query.filter(Post.category == category)
    if author is not None:
        query = query.filter(Post.user_id == author)

    tag_list = _split_tags(tags)
    if tag_list:
        query = query.filter(Post.tag_links.any(PostTag.name.in_(tag_list)))

    if search:
        pattern = _contains_pattern(search)
        query = query.filter(or_(
            Post.title.ilike(pattern, escape=LIKE_ESCAPE),
            Post.content.ilike(pattern, escape=LIKE_ESCAPE),
            Post.excerpt.ilike(pattern, escape=LIKE_ESCAPE),
            Post.tag_links.any(PostTag.name.ilike(pattern, escape=LIKE_ESCAPE)),
        ))

    start = _parse_date(from_date, "fromDate")
    end = _parse_date(to_date, "toDate")
    if start:
        query = query.filter(Post.created_at >= start)
    if end:
        query = query.filter(Post.created_at <= end)

    total = query.count()

    sort_column = SORT_FIELDS.get(sort_by, Post.created_at)
    if sort_order == "asc":
        ordering = (sort_column.asc(), Post.id.asc())
    else:
        ordering = (sort_column.desc(), Post.id.desc())

    posts = (
        query.options(joinedload(Post.author), selectinload(Post.tag_links))
        .order_by(*ordering)
        .offset(offset_for(page, limit))
        .limit(limit)
        .all()
    )

    suggestions = []
    if search:
        page_tags = {tag for post in posts for tag in post.tags}
        suggestions = _tag_suggestions(db, search, page_tags)

    return {
        "data": posts,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": page_count(total, limit),
        "suggestions": suggestions,
    }


def get_post(post_id: int, db: Session) -> Post:
    post = (
        db.query(Post)
        .options(
            joinedload(Post.author),
            selectinload(Post.tag_links),
            selectinload(Post.likes),
            selectinload(Post.user_reactions),
            selectinload(Post.shares),
        )
        .filter(Post.id == post_id)
        .first()
    )
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def _get_owned_post(post_id: int, db: Session, current_user: User, action: str) -> Post:
    post = db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if post.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Not authorized to {action} this post")
    return post


def create_post(
    db: Session,
    current_user: User,
    storage: BaseStorage,
    post_data: str,
    image: Optional[UploadFile] = None,
) -> Post:
    data = parse_json_form(post_data, "post_data")

    missing = [field for field in REQUIRED_POST_FIELDS if not str(data.get(field) or "").strip()]
    if missing:
        raise validation_failed([{"field": field, "message": f"{field} is required"} for field in missing])

    post_create = validate_schema(PostCreate, data)

    cover_image = post_create.cover_image
    if image is not None and image.filename:
        try:
            cover_image = store_image(storage, image, folder=COVER_FOLDER).url
        except StorageError:
            logger.error("Cover upload failed, creating post without a cover image")

    new_post = Post(
        title=post_create.title,
        content=post_create.content,
        excerpt=post_create.excerpt,
        category=post_create.category,
        status=post_create.status,
        user_id=current_user.id,
        read_time=compute_read_time(post_create.content),
    )
    if cover_image:
        new_post.cover_image = cover_image
    new_post.tags = post_create.tags

    db.add(new_post)
    db.commit()
    logger.info("User %s created post %s", current_user.id, new_post.id)
    return get_post(new_post.id, db)


def update_post(
    post_id: int,
    db: Session,
    current_user: User,
    storage: BaseStorage,
    post_data: Optional[str] = None,
    image: Optional[UploadFile] = None,
) -> Post:
    post = _get_owned_post(post_id, db, current_user, "update")

    data = parse_json_form(post_data, "post_data") if post_data else {}
    post_update = validate_schema(PostUpdate, data)

    for field, value in post_update.model_dump(exclude_unset=True).items():
        if value is None and field != "cover_image":
            continue
        setattr(post, field, value)

    if post_update.content is not None:
        post.read_time = compute_read_time(post.content)

    previous_cover = None
    if image is not None and image.filename:
        previous_cover = post.cover_image
        post.cover_image = store_image(storage, image, folder=COVER_FOLDER).url

    db.commit()
    if previous_cover:
        discard_image(storage, previous_cover)
    return get_post(post.id, db)


def delete_post(post_id: int, db: Session, current_user: User, storage: BaseStorage) -> None:
    post = _get_owned_post(post_id, db, current_user, "delete")
    cover_image = post.cover_image

    comment_ids = [comment_id for (comment_id,) in db.query(Comment.id).filter(Comment.post_id == post.id)]
    notification_filter = Notification.post_id == post.id
    if comment_ids:
        notification_filter = or_(notification_filter, Notification.comment_id.in_(comment_ids))
    db.query(Notification).filter(notification_filter).delete(synchronize_session=False)

    db.delete(post)
    db.commit()
    logger.info("User %s deleted post %s", current_user.id, post_id)

    discard_image(storage, cover_image)


def get_posts_by_author(author_id: int, db: Session) -> List[Post]:
    return (
        db.query(Post)
        .options(joinedload(Post.author), selectinload(Post.tag_links))
        .filter(Post.user_id == author_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )
