from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_storage_manager
from models.user import User
from schemas.base import SuccessResponse
from schemas.post import (
    LikeResult, PostListResponse, PostResponse, PostsByAuthorResponse, ReactionRequest, ReactionResult,
    ReactionSummary, ShareRequest, ShareResult, ShareStats
)
from services import post as post_service
from services import reaction as reaction_service
from storage.base import BaseStorage
from utils.auth import get_current_user, get_optional_user, require_roles

router = APIRouter(prefix="/api/posts", tags=["posts"])

require_writer = require_roles("author", "admin")


# ---------------------- Posts ----------------------
@router.get("", response_model=PostListResponse)
def list_posts(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    category: Optional[str] = None,
    tags: Optional[str] = None,
    author: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    post_status: str = Query("published", alias="status"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
):
    result = post_service.list_posts(
        db,
        page=page,
        limit=limit,
        category=category,
        tags=tags,
        author=author,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        post_status=post_status,
        from_date=from_date,
        to_date=to_date,
    )
    return {"success": True, **result}


@router.post("", response_model=SuccessResponse[PostResponse], status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: str = Form(...),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_writer),
    storage: BaseStorage = Depends(get_storage_manager),
):
    return {"success": True, "data": post_service.create_post(db, current_user, storage, post_data, image)}


@router.get("/author/{author_id}", response_model=PostsByAuthorResponse)
def get_posts_by_author(author_id: int, db: Session = Depends(get_db)):
    posts = post_service.get_posts_by_author(author_id, db)
    return {"success": True, "count": len(posts), "data": posts}


@router.get("/{post_id}", response_model=SuccessResponse[PostResponse])
def get_post(post_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": post_service.get_post(post_id, db)}


@router.put("/{post_id}", response_model=SuccessResponse[PostResponse])
def update_post(
    post_id: int,
    post_data: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_writer),
    storage: BaseStorage = Depends(get_storage_manager),
):
    return {"success": True, "data": post_service.update_post(post_id, db, current_user, storage, post_data, image)}


@router.delete("/{post_id}", response_model=SuccessResponse[dict])
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_writer),
    storage: BaseStorage = Depends(get_storage_manager),
):
    post_service.delete_post(post_id, db, current_user, storage)
    return {"success": True, "data": {}}


# ---------------------- Likes, reactions, shares ----------------------
@router.post("/{post_id}/like", response_model=SuccessResponse[LikeResult])
def like_post(post_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"success": True, "data": reaction_service.toggle_like(post_id, db, current_user)}


@router.post("/{post_id}/react", response_model=SuccessResponse[ReactionResult])
def react_to_post(
    post_id: int,
    reaction: ReactionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": reaction_service.react_to_post(post_id, reaction.type, db, current_user)}


@router.get("/{post_id}/reactions", response_model=SuccessResponse[ReactionSummary])
def get_post_reactions(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    return {"success": True, "data": reaction_service.get_post_reactions(post_id, db, current_user)}


@router.post("/{post_id}/share", response_model=SuccessResponse[ShareResult])
def track_share(
    post_id: int,
    share: Optional[ShareRequest] = None,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    platform = share.platform if share else "other"
    return {"success": True, "data": reaction_service.track_share(post_id, platform, db, current_user)}


@router.get("/{post_id}/shares", response_model=SuccessResponse[ShareStats])
def get_share_stats(post_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": reaction_service.get_share_stats(post_id, db)}
