import logging
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Author, User
from schemas.author import AuthorCreate, AuthorUpdate
from services.upload import discard_image, store_image
from storage.base import BaseStorage
from utils.errors import parse_json_form, validate_schema

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "authors"
SOCIAL_FIELDS = ("twitter", "facebook", "linkedin", "instagram")


def list_authors(db: Session) -> List[Author]:
    return db.query(Author).order_by(Author.id).all()


def get_author(author_id: int, db: Session) -> Author:
    author = db.get(Author, author_id)
    if not author:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author not found")
    return author


def get_author_profile(db: Session, current_user: User) -> Author:
    author = db.query(Author).filter(Author.user_id == current_user.id).first()
    if not author:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author profile not found")
    return author


def _ensure_email_free(db: Session, email: str, author_id: Optional[int] = None):
    query = db.query(Author).filter(Author.email == email)
    if author_id is not None:
        query = query.filter(Author.id != author_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")


def _apply(author: Author, data: BaseModel) -> None:
    values = data.model_dump(exclude_unset=True, exclude={"social"})
    for field, value in values.items():
        setattr(author, field, value)
    if "social" in data.model_fields_set and data.social is not None:
        for field in data.social.model_fields_set:
            setattr(author, field, getattr(data.social, field))


def _commit(db: Session, author: Author) -> Author:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    db.refresh(author)
    return author


def create_author(db: Session, storage: BaseStorage, author_data: str, avatar: Optional[UploadFile] = None) -> Author:
    author_create = validate_schema(AuthorCreate, parse_json_form(author_data, "author_data"))
    _ensure_email_free(db, author_create.email)

    if author_create.user_id is not None and not db.get(User, author_create.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    author = Author()
    _apply(author, author_create)
    if avatar is not None and avatar.filename:
        author.avatar = store_image(storage, avatar, folder=AVATAR_FOLDER).url

    db.add(author)
    _commit(db, author)
    logger.info("Created author %s", author.id)
    return author


def _update(db: Session, author: Author, storage: BaseStorage, author_data: Optional[str], avatar: Optional[UploadFile]) -> Author:
    data = parse_json_form(author_data, "author_data") if author_data else {}
    author_update = validate_schema(AuthorUpdate, data)
    if author_update.email:
        _ensure_email_free(db, author_update.email, author.id)

    _apply(author, author_update)

    previous_avatar = None
    if avatar is not None and avatar.filename:
        previous_avatar = author.avatar
        author.avatar = store_image(storage, avatar, folder=AVATAR_FOLDER).url

    _commit(db, author)
    if previous_avatar:
        discard_image(storage, previous_avatar)
    return author


def update_author(
    author_id: int,
    db: Session,
    current_user: User,
    storage: BaseStorage,
    author_data: Optional[str] = None,
    avatar: Optional[UploadFile] = None,
) -> Author:
    author = get_author(author_id, db)
    if not current_user.is_admin and author.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to update this author")
    return _update(db, author, storage, author_data, avatar)


def update_author_profile(
    db: Session,
    current_user: User,
    storage: BaseStorage,
    author_data: Optional[str] = None,
    avatar: Optional[UploadFile] = None,
) -> Author:
    author = get_author_profile(db, current_user)
    return _update(db, author, storage, author_data, avatar)


def delete_author(author_id: int, db: Session, storage: BaseStorage) -> None:
    author = get_author(author_id, db)
    avatar = author.avatar
    db.delete(author)
    db.commit()
    logger.info("Deleted author %s", author_id)
    discard_image(storage, avatar)
