from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

import config
from database import get_db
from dependencies import get_identity_provider, get_storage_manager
from models.user import User
from schemas.base import SuccessResponse
from schemas.user import (
    AvatarData, IdTokenSignIn, PasswordChange, ProfileUpdate, TokenResponse, UserCreate, UserLogin, UserResponse
)
from services import auth as auth_service
from services.oauth import IdentityProvider, upsert_oauth_user
from storage.base import BaseStorage
from utils.auth import get_current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(response: Response, user: User) -> dict:
    token = auth_service.issue_token(user)
    auth_service.set_token_cookie(response, token)
    return {"success": True, "token": token}


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, response: Response, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, user_data)
    return _token_response(response, user)


@router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, credentials)
    return _token_response(response, user)


@router.get("/me", response_model=SuccessResponse[UserResponse])
def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": current_user}


@router.get("/logout", response_model=SuccessResponse[dict])
def logout(response: Response, current_user: User = Depends(get_current_user)):
    auth_service.clear_token_cookie(response)
    return {"success": True, "data": {}}


@router.put("/update-profile", response_model=SuccessResponse[UserResponse])
def update_profile(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": auth_service.update_profile(db, current_user, profile)}


@router.put("/change-password", response_model=SuccessResponse[dict])
def change_password(
    passwords: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    auth_service.change_password(db, current_user, passwords)
    return {"success": True, "data": {}}


@router.post("/upload-avatar", response_model=SuccessResponse[AvatarData])
def upload_avatar(
    avatar: UploadFile = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: BaseStorage = Depends(get_storage_manager),
):
    url = auth_service.upload_avatar(db, current_user, storage, avatar)
    return {"success": True, "data": {"url": url}}


# ---------------------- Google OAuth ----------------------
@router.get("/google")
def google_login(provider: IdentityProvider = Depends(get_identity_provider)):
    return RedirectResponse(provider.authorization_url(), status_code=status.HTTP_302_FOUND)


@router.get("/google/callback", response_model=TokenResponse)
async def google_callback(
    code: str,
    response: Response,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    claims = await provider.exchange_code(code)
    user = upsert_oauth_user(db, claims)

    if config.OAUTH_SUCCESS_REDIRECT:
        token = auth_service.issue_token(user)
        redirect = RedirectResponse(
            f"{config.OAUTH_SUCCESS_REDIRECT}?{urlencode({'token': token})}",
            status_code=status.HTTP_302_FOUND,
        )
        auth_service.set_token_cookie(redirect, token)
        return redirect
    return _token_response(response, user)


@router.post("/google/token", response_model=TokenResponse)
def google_token_signin(
    sign_in: IdTokenSignIn,
    response: Response,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    claims = provider.verify_id_token(sign_in.id_token)
    user = upsert_oauth_user(db, claims)
    return _token_response(response, user)
