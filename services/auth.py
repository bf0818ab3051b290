import logging

from fastapi import HTTPException, Response, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import config
from models.user import User
from schemas.user import UserCreate, UserLogin, ProfileUpdate, PasswordChange
from services.upload import store_image
from storage.base import BaseStorage
from utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "role": user.role})


def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=config.TOKEN_COOKIE_NAME,
        value=token,
        max_age=config.COOKIE_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )


def clear_token_cookie(response: Response) -> None:
    response.delete_cookie(key=config.TOKEN_COOKIE_NAME, httponly=True, secure=config.COOKIE_SECURE, samesite="lax")


def register_user(db: Session, user_data: UserCreate) -> User:
    if db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        role=user_data.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return user


def authenticate_user(db: Session, credentials: UserLogin) -> User:
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Rejected login for %s", credentials.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return user


def update_profile(db: Session, current_user: User, profile: ProfileUpdate) -> User:
    for field, value in profile.model_dump(exclude_unset=True).items():
        if field == "name" and not value:
            continue
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return current_user


def change_password(db: Session, current_user: User, passwords: PasswordChange) -> None:
    if not verify_password(passwords.current_password, current_user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")

    current_user.hashed_password = hash_password(passwords.new_password)
    db.commit()
    logger.info("Password changed for user %s", current_user.id)


def upload_avatar(db: Session, current_user: User, storage: BaseStorage, avatar: UploadFile) -> str:
    stored = store_image(storage, avatar, folder="avatars")
    current_user.avatar = stored.url
    db.commit()
    return stored.url
