"""Content store: row policies, partial updates and error translation."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.orm import Session

from zaplanje.errors import (
    GENERIC_ERROR_MESSAGE,
    ConstraintViolation,
    NotFoundError,
    PermissionDenied,
    StoreError,
    describe_error,
)
from zaplanje.policies import Principal
from zaplanje.store import SqlContentStore


@pytest.fixture
def anonymous(db: Session) -> SqlContentStore:
    return SqlContentStore(db)


@pytest.fixture
def editor(db: Session) -> SqlContentStore:
    return SqlContentStore(db, Principal(user_id=uuid.uuid4()))


def test_anonymous_reads_only_published_posts(anonymous: SqlContentStore, editor: SqlContentStore, make_post):
    published = make_post("Javno")
    draft = make_post("Nacrt", status="draft", published_at=None)

    assert [p.id for p in anonymous.list("posts")] == [published.id]
    assert {p.id for p in editor.list("posts")} == {published.id, draft.id}

    with pytest.raises(NotFoundError):
        anonymous.get("posts", draft.id)


def test_anonymous_cannot_write_posts(anonymous: SqlContentStore):
    with pytest.raises(PermissionDenied):
        anonymous.insert("posts", {"title": "Upad", "slug": "upad"})


def test_list_filters_and_order(editor: SqlContentStore, make_post):
    low = make_post("Malo", view_count=1, featured=True)
    high = make_post("Mnogo", view_count=9, featured=True)
    make_post("Obična", view_count=5)

    rows = editor.list("posts", {"featured": True}, order=[("view_count", True)])

    assert [p.id for p in rows] == [high.id, low.id]


def test_update_is_partial(editor: SqlContentStore, make_post):
    post = make_post("Naslov", excerpt="Opis", tags=["selo"])

    updated = editor.update("posts", post.id, {"title": "Novi naslov"})

    assert updated.title == "Novi naslov"
    assert updated.excerpt == "Opis"
    assert updated.tags == ["selo"]


def test_read_only_and_unknown_columns_rejected(editor: SqlContentStore, make_post):
    post = make_post("Naslov")

    with pytest.raises(StoreError):
        editor.update("posts", post.id, {"id": uuid.uuid4()})
    with pytest.raises(StoreError):
        editor.update("posts", post.id, {"nonexistent": 1})


def test_unique_violation_translated(editor: SqlContentStore):
    editor.insert("categories", {"name": "Jedinstvena", "slug": "jedinstvena"})

    with pytest.raises(ConstraintViolation) as excinfo:
        editor.insert("categories", {"name": "Jedinstvena", "slug": "druga"})

    assert excinfo.value.status_code == 409
    assert describe_error(excinfo.value) == "Ovaj sadržaj već postoji."


def test_foreign_key_violation_translated(editor: SqlContentStore):
    with pytest.raises(ConstraintViolation):
        editor.insert("post_categories", {"post_id": uuid.uuid4(), "category_id": uuid.uuid4()})


def test_unknown_entity_and_procedure(editor: SqlContentStore):
    with pytest.raises(NotFoundError):
        editor.list("users")
    with pytest.raises(NotFoundError):
        editor.call("drop_everything", {})


def test_bookmarks_are_owner_only(db: Session, make_post):
    post = make_post("Omiljena")
    alice = SqlContentStore(db, Principal(user_id=uuid.uuid4()))
    bob = alice.as_principal(Principal(user_id=uuid.uuid4()))

    bookmark = alice.insert("user_bookmarks", {"user_id": alice.principal.user_id, "post_id": post.id})

    assert [b.id for b in alice.list("user_bookmarks")] == [bookmark.id]
    assert bob.list("user_bookmarks") == []
    with pytest.raises(NotFoundError):
        bob.delete("user_bookmarks", bookmark.id)
    with pytest.raises(PermissionDenied):
        bob.insert("user_bookmarks", {"user_id": alice.principal.user_id, "post_id": post.id})


def test_anonymous_may_only_unsubscribe(anonymous: SqlContentStore):
    subscription = anonymous.insert("newsletter_subscriptions", {"email": "citalac@example.com"})

    with pytest.raises(PermissionDenied):
        anonymous.update("newsletter_subscriptions", subscription.id, {"name": "Preimenovan"})

    updated = anonymous.update("newsletter_subscriptions", subscription.id, {"status": "unsubscribed"})
    assert updated.status == "unsubscribed"


def test_describe_error_messages():
    assert describe_error(PermissionDenied("permission denied for table posts")) == "Nemate dozvolu za ovu akciju."
    assert describe_error("violates foreign key constraint") == "Povezani sadržaj ne postoji."
    assert describe_error(NotFoundError("posts row x not found")) == "Sadržaj nije pronađen."
    assert describe_error("something odd") == "something odd"
    assert describe_error(None) == GENERIC_ERROR_MESSAGE
    assert describe_error("") == GENERIC_ERROR_MESSAGE
