from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

import config
from database import get_db
from models.user import User
from utils.security import decode_access_token

NOT_AUTHORIZED = "Not authorized to access this resource"


def get_token_from_request(request: Request) -> Optional[str]:
    """
    Get the token from the Authorization: Bearer header.
    If not in the header, fallback to the 'token' HTTP-only cookie.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get(config.TOKEN_COOKIE_NAME)


def _resolve_user(token: Optional[str], db: Session) -> Optional[User]:
    payload = decode_access_token(token)
    if not payload or payload.get("sub") is None:
        return None
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None
    return db.get(User, user_id)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = get_token_from_request(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHORIZED)

    user = _resolve_user(token, db)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHORIZED)
    return user


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """Like get_current_user, but anonymous requests get None instead of a 401."""
    token = get_token_from_request(request)
    if not token:
        return None
    return _resolve_user(token, db)


def require_roles(*roles: str):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {current_user.role} is not authorized to access this resource",
            )
        return current_user

    return role_checker
