import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_TYPE"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="blog-uploads-")
os.environ.pop("OAUTH_SUCCESS_REDIRECT", None)

import json
from typing import Optional

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from database import Base, engine
from dependencies import get_identity_provider, get_storage_manager
from main import app
from services.oauth import IdentityClaims, IdentityProvider
from storage.base import BaseStorage, StorageError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeStorage(BaseStorage):
    """In-memory image host."""

    base_url = "https://images.test/"

    def __init__(self):
        self.files = {}
        self.fail = False

    def save(self, file, filename, folder=None, content_type=None):
        if self.fail:
            raise StorageError("image host is down")
        public_id = self.build_public_id(filename, folder)
        self.files[public_id] = file.read()
        return f"{self.base_url}{public_id}"

    def delete(self, public_id):
        return self.files.pop(public_id, None) is not None

    def public_id_from_url(self, file_url):
        if not file_url or not file_url.startswith(self.base_url):
            return None
        return file_url[len(self.base_url):]


class FakeIdentityProvider(IdentityProvider):
    def __init__(self):
        self.claims = IdentityClaims(
            subject="google-123",
            email="oauth.user@example.com",
            name="Oauth User",
            picture="https://lh3.googleusercontent.com/a/pic.png",
        )

    def authorization_url(self) -> str:
        return "https://accounts.google.com/o/oauth2/auth?client_id=test"

    async def exchange_code(self, code: str) -> IdentityClaims:
        if code != "good-code":
            raise HTTPException(status_code=401, detail="Google authentication failed")
        return self.claims

    def verify_id_token(self, token: str) -> IdentityClaims:
        if token != "good-id-token":
            raise HTTPException(status_code=401, detail="Invalid Google token")
        return self.claims


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(storage, identity_provider):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_storage_manager] = lambda: storage
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, name, email, role="user", password="secret123") -> dict:
    """Registers a user and returns bearer headers; the cookie jar is left empty."""
    response = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "role": role,
    })
    assert response.status_code == 201, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}


def user_id(client, headers) -> int:
    return client.get("/api/auth/me", headers=headers).json()["data"]["id"]


def create_post(client, headers, image: Optional[tuple] = None, **overrides) -> dict:
    payload = {
        "title": "Getting started with ESP32",
        "content": "The ESP32 is a cheap microcontroller with wifi and bluetooth built in.",
        "excerpt": "A quick ESP32 primer",
        "category": "Microcontrollers",
        "tags": ["esp32", "iot"],
    }
    payload.update(overrides)
    files = {"image": image} if image else None
    response = client.post("/api/posts", headers=headers, data={"post_data": json.dumps(payload)}, files=files)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def author_headers(client):
    return register(client, "Alice", "alice@example.com", role="author")


@pytest.fixture
def admin_headers(client):
    return register(client, "Admin", "admin@example.com", role="admin")


@pytest.fixture
def reader_headers(client):
    return register(client, "Bob", "bob@example.com")
