"""Bookmarks are private to the reader who made them."""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from zaplanje.auth import create_access_token
from zaplanje.settings import Settings


def test_bookmarks_require_auth(client: TestClient):
    assert client.get("/bookmarks").status_code == 401


def test_bookmark_lifecycle(client: TestClient, auth_headers, user_id, make_post):
    post = make_post("Za kasnije")

    response = client.post("/bookmarks", headers=auth_headers, json={"post_id": str(post.id)})
    assert response.status_code == 201
    assert response.json()["user_id"] == str(user_id)

    assert client.post("/bookmarks", headers=auth_headers, json={"post_id": str(post.id)}).status_code == 409
    assert [b["post_id"] for b in client.get("/bookmarks", headers=auth_headers).json()] == [str(post.id)]

    assert client.delete(f"/bookmarks/{post.id}", headers=auth_headers).status_code == 204
    assert client.get("/bookmarks", headers=auth_headers).json() == []


def test_other_readers_cannot_see_bookmarks(client: TestClient, auth_headers, settings: Settings, make_post):
    post = make_post("Tuđe")
    client.post("/bookmarks", headers=auth_headers, json={"post_id": str(post.id)})
    other = {"Authorization": f"Bearer {create_access_token(uuid.uuid4(), settings)}"}

    assert client.get("/bookmarks", headers=other).json() == []
    assert client.delete(f"/bookmarks/{post.id}", headers=other).status_code == 404


def test_invalid_token_rejected(client: TestClient, settings: Settings):
    expired = create_access_token(uuid.uuid4(), settings, expires_in_seconds=-60)

    assert client.get("/bookmarks", headers={"Authorization": "Bearer garbage"}).status_code == 401
    response = client.get("/bookmarks", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"
