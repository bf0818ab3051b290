from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.base import SuccessResponse
from schemas.comment import CommentApproval, CommentCreate, CommentListData, CommentResponse, CommentUpdate
from services import comment as comment_service
from utils.auth import get_current_user, require_roles

router = APIRouter(prefix="/api", tags=["comments"])


@router.get("/posts/{post_id}/comments", response_model=SuccessResponse[CommentListData])
def list_post_comments(
    post_id: int,
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    return {"success": True, "data": comment_service.list_post_comments(post_id, db, page, limit)}


@router.post(
    "/posts/{post_id}/comments",
    response_model=SuccessResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: int,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": comment_service.create_comment(post_id, comment, db, current_user)}


@router.get("/comments/{comment_id}", response_model=SuccessResponse[CommentResponse])
def get_comment(comment_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": comment_service.get_comment(comment_id, db)}


@router.put("/comments/{comment_id}", response_model=SuccessResponse[CommentResponse])
def update_comment(
    comment_id: int,
    comment: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": comment_service.update_comment(comment_id, comment, db, current_user)}


@router.delete("/comments/{comment_id}", response_model=SuccessResponse[dict])
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment_service.delete_comment(comment_id, db, current_user)
    return {"success": True, "data": {}}


@router.put("/comments/{comment_id}/approve", response_model=SuccessResponse[CommentResponse])
def approve_comment(
    comment_id: int,
    approval: CommentApproval,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
):
    return {"success": True, "data": comment_service.approve_comment(comment_id, approval.is_approved, db)}
