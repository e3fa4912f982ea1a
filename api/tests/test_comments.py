"""Comments: moderated submission, threaded reads, moderation queue."""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from zaplanje.models import Comment


def add_comment(db: Session, post, status="approved", parent=None, name="Čitalac"):
    comment = Comment(
        post_id=post.id,
        author_name=name,
        author_email="citalac@example.com",
        content=f"Komentar od {name}",
        status=status,
        parent_id=parent.id if parent else None,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def test_submitted_comment_is_pending(client: TestClient, make_post):
    post = make_post("Sa komentarima")

    response = client.post(
        f"/posts/{post.id}/comments",
        json={"author_name": "Milan", "author_email": "milan@example.com", "content": "Lep tekst!"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert "author_email" not in body

    assert client.get(f"/posts/{post.id}/comments").json() == []


def test_invalid_email_rejected(client: TestClient, make_post):
    post = make_post("Sa komentarima")

    response = client.post(
        f"/posts/{post.id}/comments",
        json={"author_name": "Milan", "author_email": "nije-adresa", "content": "Tekst"},
    )

    assert response.status_code == 422


def test_reply_parent_must_belong_to_post(client: TestClient, make_post, db: Session):
    post = make_post("Prvi")
    other = make_post("Drugi")
    parent = add_comment(db, other)

    response = client.post(
        f"/posts/{post.id}/comments",
        json={
            "author_name": "Ana",
            "author_email": "ana@example.com",
            "content": "Odgovor",
            "parent_id": str(parent.id),
        },
    )

    assert response.status_code == 400


def test_tree_view_nests_approved_replies(client: TestClient, make_post, db: Session):
    post = make_post("Diskusija")
    root = add_comment(db, post, name="Prvi")
    reply = add_comment(db, post, parent=root, name="Odgovor")
    add_comment(db, post, status="pending", parent=root, name="Čeka")
    hidden_parent = add_comment(db, post, status="rejected", name="Odbijen")
    add_comment(db, post, parent=hidden_parent, name="Siroče")

    flat = client.get(f"/posts/{post.id}/comments").json()
    assert {c["author_name"] for c in flat} == {"Prvi", "Odgovor", "Siroče"}

    tree = client.get(f"/posts/{post.id}/comments", params={"view": "tree"}).json()
    assert [c["id"] for c in tree] == [str(root.id)]
    assert [c["id"] for c in tree[0]["children"]] == [str(reply.id)]


def test_moderation_flow(client: TestClient, auth_headers, make_post):
    post = make_post("Moderacija")
    created = client.post(
        f"/posts/{post.id}/comments",
        json={"author_name": "Jovana", "author_email": "jovana@example.com", "content": "Hvala"},
    ).json()

    assert client.get("/comments").status_code == 401
    queue = client.get("/comments", headers=auth_headers).json()
    assert [c["id"] for c in queue] == [created["id"]]

    response = client.patch(
        f"/comments/{created['id']}", headers=auth_headers, json={"status": "approved"}
    )
    assert response.status_code == 200
    assert [c["id"] for c in client.get(f"/posts/{post.id}/comments").json()] == [created["id"]]


def test_deleting_comment_removes_replies(client: TestClient, auth_headers, make_post, db: Session):
    post = make_post("Brisanje")
    root = add_comment(db, post)
    add_comment(db, post, parent=root)

    response = client.delete(f"/comments/{root.id}", headers=auth_headers)

    assert response.status_code == 204
    assert client.get(f"/posts/{post.id}/comments").json() == []
