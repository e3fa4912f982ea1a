from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from zaplanje.auth import create_access_token
from zaplanje.db import Base, build_engine, build_session_factory
from zaplanje.main import create_app
from zaplanje.models import Category, Post, PostCategory
from zaplanje.settings import Settings

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'zaplanje.db'}",
        log_level="INFO",
        search_text_config="serbian",
        cors_origins=["http://localhost:3000"],
        jwt_secret_key=TEST_JWT_SECRET,
        run_migrations=False,
    )


@pytest.fixture()
def engine(settings: Settings) -> Generator[Engine, None, None]:
    engine = build_engine(settings.database_url)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def app(settings: Settings, engine: Engine) -> FastAPI:
    return create_app(settings, engine)


@pytest.fixture()
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db(engine: Engine) -> Generator[Session, None, None]:
    """Create a database session for testing."""
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture()
def auth_headers(settings: Settings, user_id: uuid.UUID) -> dict[str, str]:
    token = create_access_token(user_id, settings)
    return {"Authorization": f"Bearer {token}"}


def utc(days_ago: float = 0) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days_ago)


@pytest.fixture()
def make_post(db: Session) -> Callable[..., Post]:
    """Insert a post straight into the database; published a day ago unless told otherwise."""

    def _make(title: str = "Test post", **overrides) -> Post:
        values = {
            "title": title,
            "slug": f"post-{uuid.uuid4().hex[:10]}",
            "excerpt": "",
            "content": "",
            "status": "published",
            "published_at": utc(1),
            "reading_time": 1,
            "tags": [],
            "featured": False,
            "view_count": 0,
        }
        values.update(overrides)
        post = Post(**values)
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make


@pytest.fixture()
def make_category(db: Session) -> Callable[..., Category]:
    def _make(name: str, *posts: Post) -> Category:
        category = Category(name=name, slug=f"cat-{uuid.uuid4().hex[:8]}", color="#6B7280")
        db.add(category)
        db.flush()
        for post in posts:
            db.add(PostCategory(post_id=post.id, category_id=category.id))
        db.commit()
        db.refresh(category)
        return category

    return _make
