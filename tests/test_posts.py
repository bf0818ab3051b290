import json
from datetime import datetime, timezone

from conftest import PNG_BYTES, create_post, register, user_id
from database import SessionLocal
from models import Post


class TestCreatePost:
    def test_author_creates_post(self, client, author_headers):
        post = create_post(client, author_headers, content="word " * 401)
        assert post["title"] == "Getting started with ESP32"
        assert post["tags"] == ["esp32", "iot"]
        assert post["readTime"] == 3
        assert post["status"] == "published"
        assert post["author"]["name"] == "Alice"
        assert post["likesCount"] == 0
        assert post["reactions"] == {"thumbsUp": 0, "heart": 0, "clap": 0, "wow": 0, "sad": 0}

    def test_tags_from_comma_separated_string(self, client, author_headers):
        post = create_post(client, author_headers, tags=" esp32, iot ,,esp32 ")
        assert post["tags"] == ["esp32", "iot"]

    def test_missing_fields_are_listed(self, client, author_headers):
        response = client.post(
            "/api/posts",
            headers=author_headers,
            data={"post_data": json.dumps({"title": "Only a title", "content": ""})},
        )
        assert response.status_code == 400
        fields = [error["field"] for error in response.json()["errors"]]
        assert fields == ["content", "excerpt", "category"]

    def test_invalid_json(self, client, author_headers):
        response = client.post("/api/posts", headers=author_headers, data={"post_data": "{not json"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "post_data"

    def test_invalid_category(self, client, author_headers):
        response = client.post("/api/posts", headers=author_headers, data={"post_data": json.dumps({
            "title": "A title",
            "content": "Some content here",
            "excerpt": "Excerpt",
            "category": "Cooking",
        })})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "category"

    def test_reader_cannot_create(self, client, reader_headers):
        response = client.post("/api/posts", headers=reader_headers, data={"post_data": "{}"})
        assert response.status_code == 403
        assert response.json()["message"] == "Role user is not authorized to access this resource"

    def test_anonymous_cannot_create(self, client):
        response = client.post("/api/posts", data={"post_data": "{}"})
        assert response.status_code == 401

    def test_cover_image_upload(self, client, author_headers, storage):
        post = create_post(client, author_headers, image=("cover.png", PNG_BYTES, "image/png"))
        assert post["coverImage"].startswith("https://images.test/posts/")
        assert len(storage.files) == 1

    def test_cover_upload_failure_still_creates_post(self, client, author_headers, storage):
        storage.fail = True
        post = create_post(client, author_headers, image=("cover.png", PNG_BYTES, "image/png"))
        assert not post["coverImage"].startswith("https://images.test/")


class TestReadPosts:
    def test_get_post(self, client, author_headers):
        post = create_post(client, author_headers)
        response = client.get(f"/api/posts/{post['id']}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == post["id"]
        assert set(data["author"]) == {"id", "name", "avatar", "bio"}

    def test_get_missing_post(self, client):
        response = client.get("/api/posts/999")
        assert response.status_code == 404
        assert response.json()["message"] == "Post not found"

    def test_list_defaults_to_published(self, client, author_headers):
        create_post(client, author_headers, title="Published post")
        create_post(client, author_headers, title="Draft post", status="draft")

        body = client.get("/api/posts").json()
        assert [p["title"] for p in body["data"]] == ["Published post"]

        body = client.get("/api/posts", params={"status": "all"}).json()
        assert body["total"] == 2

    def test_list_pagination(self, client, author_headers):
        for i in range(5):
            create_post(client, author_headers, title=f"Post number {i}")

        body = client.get("/api/posts", params={"page": 2, "limit": 2}).json()
        assert body["success"] is True
        assert body["total"] == 5
        assert body["pages"] == 3
        assert body["page"] == 2
        assert body["limit"] == 2
        assert [p["title"] for p in body["data"]] == ["Post number 2", "Post number 1"]
        assert set(body["data"][0]["author"]) == {"id", "name", "avatar"}

    def test_list_filters(self, client, author_headers):
        create_post(client, author_headers, title="Robot arm", category="Robotics", tags=["servo"])
        create_post(client, author_headers, title="Python tricks", category="Programming", tags=["python"])
        create_post(client, author_headers, title="Rust intro", category="Programming", tags=["rust"])

        by_category = client.get("/api/posts", params={"category": "Programming"}).json()
        assert by_category["total"] == 2

        by_tags = client.get("/api/posts", params={"tags": "servo, rust"}).json()
        assert sorted(p["title"] for p in by_tags["data"]) == ["Robot arm", "Rust intro"]

        author_id = user_id(client, author_headers)
        other = register(client, "Dora", "dora@example.com", role="author")
        create_post(client, other, title="Dora's post")
        by_author = client.get("/api/posts", params={"author": author_id}).json()
        assert by_author["total"] == 3

    def test_list_sorting(self, client, author_headers):
        create_post(client, author_headers, title="Bravo")
        create_post(client, author_headers, title="Alpha")
        create_post(client, author_headers, title="Charlie")

        body = client.get("/api/posts", params={"sortBy": "title", "sortOrder": "asc"}).json()
        assert [p["title"] for p in body["data"]] == ["Alpha", "Bravo", "Charlie"]

        body = client.get("/api/posts", params={"sortBy": "password"}).json()
        assert [p["title"] for p in body["data"]] == ["Charlie", "Alpha", "Bravo"]

    def test_search_and_suggestions(self, client, author_headers):
        create_post(client, author_headers, title="Arduino basics", tags=["arduino"])
        create_post(client, author_headers, title="Other topic", tags=["arduino-nano", "misc"])
        create_post(client, author_headers, title="Unrelated", content="Nothing to see here", tags=["misc"])

        body = client.get("/api/posts", params={"search": "ARDUINO", "limit": 1}).json()
        assert body["total"] == 2
        page_tags = set(body["data"][0]["tags"])
        assert body["suggestions"]
        assert not page_tags & set(body["suggestions"])
        assert all("arduino" in tag for tag in body["suggestions"])

    def test_no_suggestions_without_search(self, client, author_headers):
        create_post(client, author_headers)
        assert client.get("/api/posts").json()["suggestions"] == []

    def test_search_treats_wildcards_literally(self, client, author_headers):
        create_post(client, author_headers, title="Arduino basics", tags=["arduino"])
        create_post(client, author_headers, title="Servo control", tags=["servo"])

        for term in ("_", "%"):
            body = client.get("/api/posts", params={"search": term}).json()
            assert body["total"] == 0
            assert body["suggestions"] == []

        create_post(client, author_headers, title="snake_case tips", tags=["python"])
        body = client.get("/api/posts", params={"search": "_"}).json()
        assert [p["title"] for p in body["data"]] == ["snake_case tips"]

    def test_search_matches_content_and_excerpt(self, client, author_headers):
        create_post(client, author_headers, title="One", content="Soldering a flux capacitor at home.", excerpt="Parts", tags=["misc"])
        create_post(client, author_headers, title="Two", content="Plain words only here.", excerpt="Flux tips", tags=["misc"])
        create_post(client, author_headers, title="Three", content="Plain words only here.", excerpt="Parts", tags=["misc"])

        body = client.get("/api/posts", params={"search": "flux"}).json()
        assert body["total"] == 2
        assert [p["title"] for p in body["data"]] == ["Two", "One"]

    def test_search_pages(self, client, author_headers):
        for title in ("Sensor one", "Sensor two", "Sensor three", "Motor"):
            create_post(client, author_headers, title=title, content="Nothing else.", excerpt="Short", tags=["misc"])

        body = client.get("/api/posts", params={"search": "sensor", "limit": 2}).json()
        assert body["total"] == 3
        assert body["pages"] == 2
        assert [p["title"] for p in body["data"]] == ["Sensor three", "Sensor two"]

        second = client.get("/api/posts", params={"search": "sensor", "limit": 2, "page": 2}).json()
        assert [p["title"] for p in second["data"]] == ["Sensor one"]

    def test_date_range_filter(self, client, author_headers):
        january = create_post(client, author_headers, title="January")
        june = create_post(client, author_headers, title="June")
        create_post(client, author_headers, title="Today")

        db = SessionLocal()
        try:
            db.query(Post).filter(Post.id == january["id"]).update({"created_at": datetime(2024, 1, 1, tzinfo=timezone.utc)})
            db.query(Post).filter(Post.id == june["id"]).update({"created_at": datetime(2024, 6, 1, tzinfo=timezone.utc)})
            db.commit()
        finally:
            db.close()

        body = client.get("/api/posts", params={"fromDate": "2024-03-01", "toDate": "2024-12-31"}).json()
        assert [p["title"] for p in body["data"]] == ["June"]

        body = client.get("/api/posts", params={"toDate": "2024-12-31T23:59:59Z"}).json()
        assert [p["title"] for p in body["data"]] == ["June", "January"]

    def test_invalid_date_filter(self, client):
        response = client.get("/api/posts", params={"fromDate": "yesterday"})
        assert response.status_code == 400

    def test_posts_by_author(self, client, author_headers):
        create_post(client, author_headers, title="First one")
        create_post(client, author_headers, title="Second one")
        body = client.get(f"/api/posts/author/{user_id(client, author_headers)}").json()
        assert body["count"] == 2
        assert [p["title"] for p in body["data"]] == ["Second one", "First one"]


class TestUpdateAndDeletePost:
    def test_owner_updates_post(self, client, author_headers):
        post = create_post(client, author_headers)
        response = client.put(
            f"/api/posts/{post['id']}",
            headers=author_headers,
            data={"post_data": json.dumps({"title": "Updated title", "content": "word " * 250, "tags": ["new"]})},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Updated title"
        assert data["readTime"] == 2
        assert data["tags"] == ["new"]
        assert data["excerpt"] == post["excerpt"]

    def test_other_author_cannot_update(self, client, author_headers):
        post = create_post(client, author_headers)
        other = register(client, "Dora", "dora@example.com", role="author")
        response = client.put(
            f"/api/posts/{post['id']}",
            headers=other,
            data={"post_data": json.dumps({"title": "Hijacked"})},
        )
        assert response.status_code == 403

    def test_admin_can_update_any_post(self, client, author_headers, admin_headers):
        post = create_post(client, author_headers)
        response = client.put(
            f"/api/posts/{post['id']}",
            headers=admin_headers,
            data={"post_data": json.dumps({"status": "draft"})},
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "draft"

    def test_update_missing_post(self, client, author_headers):
        response = client.put("/api/posts/42", headers=author_headers, data={"post_data": "{}"})
        assert response.status_code == 404

    def test_replacing_cover_removes_old_image(self, client, author_headers, storage):
        post = create_post(client, author_headers, image=("cover.png", PNG_BYTES, "image/png"))
        response = client.put(
            f"/api/posts/{post['id']}",
            headers=author_headers,
            files={"image": ("new.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 200
        assert response.json()["data"]["coverImage"] != post["coverImage"]
        assert len(storage.files) == 1

    def test_delete_post_removes_comments_and_notifications(self, client, author_headers, reader_headers, storage):
        post = create_post(client, author_headers, image=("cover.png", PNG_BYTES, "image/png"))
        client.post(f"/api/posts/{post['id']}/comments", headers=reader_headers, json={"content": "Nice!"})
        client.post(f"/api/posts/{post['id']}/like", headers=reader_headers)
        assert client.get("/api/notifications/unread-count", headers=author_headers).json()["data"]["count"] == 2

        response = client.delete(f"/api/posts/{post['id']}", headers=author_headers)
        assert response.status_code == 200
        assert client.get(f"/api/posts/{post['id']}").status_code == 404
        assert client.get("/api/notifications/unread-count", headers=author_headers).json()["data"]["count"] == 0
        assert storage.files == {}

    def test_other_author_cannot_delete(self, client, author_headers):
        post = create_post(client, author_headers)
        other = register(client, "Dora", "dora@example.com", role="author")
        assert client.delete(f"/api/posts/{post['id']}", headers=other).status_code == 403
