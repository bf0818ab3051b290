from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_storage_manager
from models.user import User
from schemas.author import AuthorListResponse, AuthorResponse
from schemas.base import SuccessResponse
from services import author as author_service
from storage.base import BaseStorage
from utils.auth import get_current_user, require_roles

router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.get("", response_model=AuthorListResponse)
def list_authors(db: Session = Depends(get_db)):
    authors = author_service.list_authors(db)
    return {"success": True, "count": len(authors), "data": authors}


@router.post("", response_model=SuccessResponse[AuthorResponse], status_code=status.HTTP_201_CREATED)
def create_author(
    author_data: str = Form(...),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
    storage: BaseStorage = Depends(get_storage_manager),
):
    return {"success": True, "data": author_service.create_author(db, storage, author_data, avatar)}


# Declared before /{author_id} so "profile" is not parsed as an id
@router.get("/profile/me", response_model=SuccessResponse[AuthorResponse])
def get_author_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"success": True, "data": author_service.get_author_profile(db, current_user)}


@router.put("/profile/me", response_model=SuccessResponse[AuthorResponse])
def update_author_profile(
    author_data: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: BaseStorage = Depends(get_storage_manager),
):
    author = author_service.update_author_profile(db, current_user, storage, author_data, avatar)
    return {"success": True, "data": author}


@router.get("/{author_id}", response_model=SuccessResponse[AuthorResponse])
def get_author(author_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": author_service.get_author(author_id, db)}


@router.put("/{author_id}", response_model=SuccessResponse[AuthorResponse])
def update_author(
    author_id: int,
    author_data: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin", "author")),
    storage: BaseStorage = Depends(get_storage_manager),
):
    author = author_service.update_author(author_id, db, current_user, storage, author_data, avatar)
    return {"success": True, "data": author}


@router.delete("/{author_id}", response_model=SuccessResponse[dict])
def delete_author(
    author_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("admin")),
    storage: BaseStorage = Depends(get_storage_manager),
):
    author_service.delete_author(author_id, db, storage)
    return {"success": True, "data": {}}
