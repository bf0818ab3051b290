import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import HTTPException
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from sqlalchemy.orm import Session

import config
from models.user import User
from utils.security import hash_password

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


@dataclass
class IdentityClaims:
    subject: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


class IdentityProvider(ABC):
    """Turns an OAuth authorization code (or ID token) into verified identity claims."""

    @abstractmethod
    def authorization_url(self) -> str:
        pass

    @abstractmethod
    async def exchange_code(self, code: str) -> IdentityClaims:
        pass

    @abstractmethod
    def verify_id_token(self, token: str) -> IdentityClaims:
        pass


class GoogleIdentityProvider(IdentityProvider):
    def __init__(
        self,
        client_id: Optional[str] = config.GOOGLE_CLIENT_ID,
        client_secret: Optional[str] = config.GOOGLE_CLIENT_SECRET,
        redirect_uri: Optional[str] = config.GOOGLE_REDIRECT_URI,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def _require_config(self):
        if not self.client_id or not self.client_secret or not self.redirect_uri:
            raise HTTPException(status_code=500, detail="Google OAuth configuration missing.")

    def authorization_url(self) -> str:
        self._require_config()
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid email profile",
            "access_type": "offline",
            "prompt": "select_account"
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> IdentityClaims:
        self._require_config()
        token_params = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient() as client:
                token_response = await client.post(GOOGLE_TOKEN_URL, data=token_params)
                token_response.raise_for_status()
                access_token = token_response.json()["access_token"]

                userinfo_response = await client.get(GOOGLE_USERINFO_URL, headers={
                    "Authorization": f"Bearer {access_token}"
                })
                userinfo_response.raise_for_status()
                user_data = userinfo_response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Google rejected the authorization code: %s", e.response.text)
            raise HTTPException(status_code=401, detail="Google authentication failed")
        except httpx.HTTPError:
            logger.exception("Could not reach Google OAuth endpoints")
            raise HTTPException(status_code=500, detail="Google authentication is unavailable")

        if not user_data.get("email"):
            raise HTTPException(status_code=401, detail="Google account has no email address")

        return IdentityClaims(
            subject=user_data["sub"],
            email=user_data["email"],
            name=user_data.get("name"),
            picture=user_data.get("picture"),
        )

    def verify_id_token(self, token: str) -> IdentityClaims:
        if not self.client_id:
            raise HTTPException(status_code=500, detail="Google OAuth configuration missing.")

        try:
            idinfo = id_token.verify_oauth2_token(token, google_requests.Request(), self.client_id)
        except ValueError:
            raise HTTPException(status_code=401, detail="Invalid Google token")

        if not idinfo.get("email"):
            raise HTTPException(status_code=401, detail="Google account has no email address")

        return IdentityClaims(
            subject=idinfo["sub"],
            email=idinfo["email"],
            name=idinfo.get("name"),
            picture=idinfo.get("picture"),
        )


def upsert_oauth_user(db: Session, claims: IdentityClaims) -> User:
    """Finds the account for the claims' email, creating it on first login."""
    email = claims.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if user:
        user.google_id = claims.subject
        if claims.picture:
            user.avatar = claims.picture
    else:
        user = User(
            email=email,
            name=(claims.name or email.split("@")[0])[:50],
            google_id=claims.subject,
            avatar=claims.picture or config.DEFAULT_USER_AVATAR,
            role="author",
            # Placeholder so password login stays impossible until a reset
            hashed_password=hash_password(secrets.token_urlsafe(32)),
        )
        db.add(user)
        logger.info("Creating account for first Google login of %s", email)

    db.commit()
    db.refresh(user)
    return user
