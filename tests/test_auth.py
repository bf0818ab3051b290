from conftest import PNG_BYTES, register, user_id
from utils.security import decode_access_token


class TestRegisterAndLogin:
    def test_register_returns_token_and_sets_cookie(self, client):
        response = client.post("/api/auth/register", json={
            "name": "Carla",
            "email": "Carla@Example.com",
            "password": "secret123",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert "token" in response.cookies

    def test_register_duplicate_email(self, client):
        register(client, "Carla", "carla@example.com")
        response = client.post("/api/auth/register", json={
            "name": "Other",
            "email": "carla@example.com",
            "password": "secret123",
        })
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already registered", "errors": None}

    def test_register_validation_lists_fields(self, client):
        response = client.post("/api/auth/register", json={"name": "C", "email": "nope", "password": "123"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {error["field"] for error in body["errors"]}
        assert {"name", "email", "password"} <= fields

    def test_register_rejects_unknown_role(self, client):
        response = client.post("/api/auth/register", json={
            "name": "Carla",
            "email": "carla@example.com",
            "password": "secret123",
            "role": "superuser",
        })
        assert response.status_code == 400

    def test_register_with_each_role(self, client):
        for role in ("user", "author", "admin"):
            headers = register(client, role.title(), f"{role}@example.com", role=role)
            assert client.get("/api/auth/me", headers=headers).json()["data"]["role"] == role

    def test_login(self, client):
        headers = register(client, "Carla", "carla@example.com", role="author")
        response = client.post("/api/auth/login", json={"email": "carla@example.com", "password": "secret123"})
        assert response.status_code == 200

        claims = decode_access_token(response.json()["token"])
        assert claims["sub"] == str(user_id(client, headers))
        assert claims["role"] == "author"
        assert claims["exp"]

    def test_login_wrong_password(self, client):
        register(client, "Carla", "carla@example.com")
        response = client.post("/api/auth/login", json={"email": "carla@example.com", "password": "wrong-pass"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_unknown_email(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestCurrentUser:
    def test_me_never_exposes_password(self, client):
        headers = register(client, "Carla", "carla@example.com", role="author")
        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "carla@example.com"
        assert data["role"] == "author"
        assert "password" not in data
        assert "hashedPassword" not in data

    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized to access this resource"

    def test_me_with_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_cookie_token_is_accepted(self, client):
        client.post("/api/auth/register", json={
            "name": "Carla",
            "email": "carla@example.com",
            "password": "secret123",
        })
        response = client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Carla"

    def test_logout_clears_cookie(self, client):
        client.post("/api/auth/register", json={
            "name": "Carla",
            "email": "carla@example.com",
            "password": "secret123",
        })
        response = client.get("/api/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}
        assert client.get("/api/auth/me").status_code == 401


class TestProfile:
    def test_update_profile(self, client):
        headers = register(client, "Carla", "carla@example.com")
        response = client.put("/api/auth/update-profile", headers=headers, json={"name": "Carla M", "bio": "Maker"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Carla M"
        assert data["bio"] == "Maker"

    def test_change_password(self, client):
        headers = register(client, "Carla", "carla@example.com")
        response = client.put("/api/auth/change-password", headers=headers, json={
            "currentPassword": "secret123",
            "newPassword": "newsecret456",
        })
        assert response.status_code == 200

        old = client.post("/api/auth/login", json={"email": "carla@example.com", "password": "secret123"})
        assert old.status_code == 401
        new = client.post("/api/auth/login", json={"email": "carla@example.com", "password": "newsecret456"})
        assert new.status_code == 200

    def test_change_password_wrong_current(self, client):
        headers = register(client, "Carla", "carla@example.com")
        response = client.put("/api/auth/change-password", headers=headers, json={
            "currentPassword": "nope-nope",
            "newPassword": "newsecret456",
        })
        assert response.status_code == 401

    def test_change_password_too_short(self, client):
        headers = register(client, "Carla", "carla@example.com")
        response = client.put("/api/auth/change-password", headers=headers, json={
            "currentPassword": "secret123",
            "newPassword": "123",
        })
        assert response.status_code == 400

    def test_upload_avatar(self, client, storage):
        headers = register(client, "Carla", "carla@example.com")
        response = client.post(
            "/api/auth/upload-avatar",
            headers=headers,
            files={"avatar": ("me.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 200
        url = response.json()["data"]["url"]
        assert url.startswith("https://images.test/avatars/")
        assert client.get("/api/auth/me", headers=headers).json()["data"]["avatar"] == url

    def test_upload_avatar_rejects_non_images(self, client):
        headers = register(client, "Carla", "carla@example.com")
        response = client.post(
            "/api/auth/upload-avatar",
            headers=headers,
            files={"avatar": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400


class TestGoogleOAuth:
    def test_login_redirects_to_consent(self, client):
        response = client.get("/api/auth/google", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"].startswith("https://accounts.google.com/")

    def test_callback_creates_author_account(self, client):
        response = client.get("/api/auth/google/callback", params={"code": "good-code"})
        assert response.status_code == 200
        token = response.json()["token"]
        client.cookies.clear()

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["data"]
        assert me["email"] == "oauth.user@example.com"
        assert me["role"] == "author"
        assert me["avatar"] == "https://lh3.googleusercontent.com/a/pic.png"

    def test_callback_links_existing_account(self, client):
        headers = register(client, "Existing", "oauth.user@example.com")
        existing_id = client.get("/api/auth/me", headers=headers).json()["data"]["id"]

        response = client.get("/api/auth/google/callback", params={"code": "good-code"})
        token = response.json()["token"]
        client.cookies.clear()

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["data"]
        assert me["id"] == existing_id
        assert me["role"] == "user"

    def test_callback_with_bad_code(self, client):
        response = client.get("/api/auth/google/callback", params={"code": "bad"})
        assert response.status_code == 401

    def test_id_token_sign_in(self, client):
        response = client.post("/api/auth/google/token", json={"idToken": "good-id-token"})
        assert response.status_code == 200
        assert response.json()["token"]

    def test_id_token_sign_in_rejects_invalid_token(self, client):
        response = client.post("/api/auth/google/token", json={"idToken": "forged"})
        assert response.status_code == 401
