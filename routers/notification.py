from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.base import SuccessResponse
from schemas.notification import NotificationListData, NotificationResponse, UnreadCount
from services import notification as notification_service
from utils.auth import get_current_user

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=SuccessResponse[NotificationListData])
def get_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False, alias="unreadOnly"),
):
    """Lists the current user's notifications, newest first."""
    data = notification_service.get_notifications(db, current_user, page, limit, unread_only)
    return {"success": True, "data": data}


@router.get("/unread-count", response_model=SuccessResponse[UnreadCount])
def get_unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"success": True, "data": {"count": notification_service.get_unread_count(db, current_user)}}


@router.put("/read-all", response_model=SuccessResponse[dict])
def mark_all_as_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = notification_service.mark_all_as_read(db, current_user)
    return {"success": True, "data": {"updated": updated}}


@router.put("/{notification_id}/read", response_model=SuccessResponse[NotificationResponse])
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": notification_service.mark_as_read(notification_id, db, current_user)}


@router.delete("/{notification_id}", response_model=SuccessResponse[dict])
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification_service.delete_notification(notification_id, db, current_user)
    return {"success": True, "data": {}}
