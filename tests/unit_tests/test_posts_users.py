"""Tests for the plain post and user document endpoints."""

import re

from tests.mocks.models import make_wav


class TestPosts:
    def test_create_and_list_newest_first(self, client):
        for text in ("first", "second"):
            resp = client.post("/post", json={"email": "a@x.com", "post": text})
            assert resp.status_code == 200
            assert resp.json()["acknowledged"] is True

        posts = client.get("/post").json()
        assert [p["post"] for p in posts] == ["second", "first"]
        assert all(p["type"] == "text" for p in posts)
        assert all("_id" in p for p in posts)

    def test_user_posts_filtered(self, client):
        client.post("/post", json={"email": "a@x.com", "post": "mine"})
        client.post("/post", json={"email": "b@x.com", "post": "theirs"})
        posts = client.get("/userpost", params={"email": "a@x.com"}).json()
        assert [p["post"] for p in posts] == ["mine"]

    def test_audio_posts_cannot_bypass_upload(self, client):
        resp = client.post("/post", json={"email": "a@x.com", "type": "audio", "file": "x.mp3"})
        assert resp.status_code == 400
        assert client.get("/post").json() == []


class TestUsers:
    def test_register_and_lookup(self, client):
        resp = client.post("/register", json={"email": "a@x.com", "name": "Ann"})
        assert resp.status_code == 200
        inserted_id = resp.json()["insertedId"]

        users = client.get("/loggedinuser", params={"email": "a@x.com"}).json()
        assert users == [{"email": "a@x.com", "name": "Ann", "_id": inserted_id}]
        assert len(client.get("/user").json()) == 1

    def test_update_existing(self, client):
        client.post("/register", json={"email": "a@x.com", "name": "Ann"})
        resp = client.patch("/userupdate/a@x.com", json={"bio": "hello"})
        assert resp.json() == {"acknowledged": True, "modifiedCount": 1}
        (user,) = client.get("/loggedinuser", params={"email": "a@x.com"}).json()
        assert user["bio"] == "hello"
        assert user["name"] == "Ann"

    def test_update_upserts(self, client):
        resp = client.patch("/userupdate/new@x.com", json={"name": "New"})
        data = resp.json()
        assert data["acknowledged"] is True
        assert "upsertedId" in data
        (user,) = client.get("/loggedinuser", params={"email": "new@x.com"}).json()
        assert user["name"] == "New"


class TestMalformedPosts:
    def test_non_string_email_is_rejected(self, client):
        resp = client.post("/post", json={"email": 123, "post": "hi"})
        assert resp.status_code == 400

        listed = client.get("/post")
        assert listed.status_code == 200
        assert listed.json() == []

    def test_missing_email_is_rejected(self, client):
        resp = client.post("/post", json={"post": "anonymous"})
        assert resp.status_code == 400

    def test_blank_email_is_rejected(self, client):
        resp = client.post("/post", json={"email": "   ", "post": "hi"})
        assert resp.status_code == 400


class TestEmailCase:
    def test_text_post_lookup_ignores_case(self, client):
        client.post("/post", json={"email": "A@X.com", "post": "hello"})
        posts = client.get("/userpost", params={"email": "a@x.COM"}).json()
        assert [p["post"] for p in posts] == ["hello"]
        assert posts[0]["email"] == "a@x.com"

    def test_audio_post_found_by_mixed_case_email(self, client, gateway, mailer):
        client.post("/request-otp", json={"email": "A@x.com"})
        code = re.search(r"\b(\d{6})\b", mailer.last_to("a@x.com")["body"]).group(1)
        resp = client.post(
            "/upload-audio",
            data={"email": "A@x.com", "otp": code},
            files={"audio": ("clip.wav", make_wav(3), "audio/wav")},
        )
        assert resp.status_code == 200

        posts = client.get("/userpost", params={"email": "A@x.com"}).json()
        assert [p["type"] for p in posts] == ["audio"]

    def test_user_lookup_and_update_ignore_case(self, client):
        client.post("/register", json={"email": "Ann@X.com", "name": "Ann"})
        client.patch("/userupdate/ANN@x.com", json={"bio": "hi"})

        users = client.get("/loggedinuser", params={"email": "ann@x.com"}).json()
        assert len(users) == 1
        assert users[0]["email"] == "ann@x.com"
        assert users[0]["bio"] == "hi"
