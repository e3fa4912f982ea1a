"""Post endpoints: listing, lookup, management."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from zaplanje.models import PostCategory


def test_list_posts_only_shows_published(client: TestClient, make_post):
    older = make_post("Stara priča", published_at=datetime.now(timezone.utc) - timedelta(days=10))
    newer = make_post("Nova priča", published_at=datetime.now(timezone.utc) - timedelta(days=1))
    make_post("Nacrt", status="draft", published_at=None)
    make_post("Budućnost", published_at=datetime.now(timezone.utc) + timedelta(days=3))

    response = client.get("/posts")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [str(newer.id), str(older.id)]


def test_list_posts_filters_and_sorts(client: TestClient, make_post, make_category):
    quiet = make_post("Tiha", view_count=1)
    popular = make_post("Popularna", view_count=50, featured=True)
    other = make_post("Druga", view_count=10)
    culture = make_category("Kultura test", quiet, popular)

    response = client.get("/posts", params={"category": str(culture.id), "sort": "popular"})
    assert [p["id"] for p in response.json()] == [str(popular.id), str(quiet.id)]

    response = client.get("/posts", params={"featured": "true"})
    assert [p["id"] for p in response.json()] == [str(popular.id)]

    response = client.get("/posts", params={"sort": "popular"})
    assert [p["id"] for p in response.json()] == [str(popular.id), str(other.id), str(quiet.id)]


def test_list_posts_rejects_unknown_sort(client: TestClient):
    assert client.get("/posts", params={"sort": "random"}).status_code == 422


def test_get_post_by_slug(client: TestClient, make_post):
    post = make_post("Zaplanjski vez", slug="zaplanjski-vez")

    response = client.get("/posts/by-slug/zaplanjski-vez")

    assert response.status_code == 200
    assert response.json()["id"] == str(post.id)


def test_draft_hidden_from_anonymous_readers(client: TestClient, make_post, auth_headers):
    draft = make_post("Nacrt", status="draft", published_at=None)

    assert client.get(f"/posts/{draft.id}").status_code == 404
    assert client.get(f"/posts/{draft.id}", headers=auth_headers).status_code == 200


def test_create_post_requires_auth(client: TestClient):
    response = client.post("/posts", json={"title": "Test"})
    assert response.status_code == 401


def test_create_post_derives_fields(client: TestClient, auth_headers):
    content = "<p>" + " ".join(["reč"] * 450) + "</p>"

    response = client.post(
        "/posts",
        headers=auth_headers,
        json={"title": "Манастир Свети Никола", "content": content, "status": "published"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "manastir-sveti-nikola"
    assert body["reading_time"] == 3
    assert body["excerpt"].endswith("...")
    assert "<p>" not in body["excerpt"]
    assert body["published_at"] is not None
    assert body["view_count"] == 0


def test_create_draft_has_no_publication_time(client: TestClient, auth_headers):
    response = client.post("/posts", headers=auth_headers, json={"title": "Radna verzija"})

    assert response.status_code == 201
    assert response.json()["status"] == "draft"
    assert response.json()["published_at"] is None


def test_duplicate_slug_is_a_conflict(client: TestClient, auth_headers, make_post):
    make_post("Original", slug="ista-adresa")

    response = client.post(
        "/posts", headers=auth_headers, json={"title": "Kopija", "slug": "ista-adresa"}
    )

    assert response.status_code == 409
    assert "duplicate key" in response.json()["detail"]


def test_update_post_changes_only_given_fields(client: TestClient, auth_headers, make_post):
    post = make_post("Pre izmene", excerpt="Kratak opis", featured=False)

    response = client.patch(f"/posts/{post.id}", headers=auth_headers, json={"featured": True})

    assert response.status_code == 200
    body = response.json()
    assert body["featured"] is True
    assert body["title"] == "Pre izmene"
    assert body["excerpt"] == "Kratak opis"


def test_set_and_list_post_categories(client: TestClient, auth_headers, make_post, make_category):
    post = make_post("Sa kategorijama")
    first = make_category("Prva")
    second = make_category("Druga", post)

    response = client.put(
        f"/posts/{post.id}/categories",
        headers=auth_headers,
        json={"category_ids": [str(first.id)]},
    )
    assert response.status_code == 200
    assert [link["category_id"] for link in response.json()] == [str(first.id)]

    response = client.get(f"/posts/{post.id}/categories")
    assert [c["id"] for c in response.json()] == [str(first.id)]
    assert str(second.id) not in {c["id"] for c in response.json()}


def test_delete_post_cascades(client: TestClient, auth_headers, make_post, make_category, db: Session):
    post = make_post("Za brisanje")
    make_category("Privremena", post)
    post_id = post.id

    response = client.delete(f"/posts/{post_id}", headers=auth_headers)

    assert response.status_code == 204
    assert client.get(f"/posts/{post_id}").status_code == 404
    db.expire_all()
    assert db.execute(select(PostCategory).where(PostCategory.post_id == post_id)).first() is None


def test_list_all_view_skips_listing_rules(client: TestClient, auth_headers, make_post):
    published = make_post("Objavljen")
    draft = make_post("Nacrt", status="draft", published_at=None)

    anonymous = client.get("/posts", params={"view": "all"}).json()
    editor = client.get("/posts", params={"view": "all"}, headers=auth_headers).json()

    assert [p["id"] for p in anonymous] == [str(published.id)]
    assert [p["id"] for p in editor] == [str(published.id), str(draft.id)]
