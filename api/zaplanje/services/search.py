"""Ranked full-text search over published posts.

PostgreSQL does the work with ``to_tsvector``/``plainto_tsquery``/``ts_rank``
using the configured text search configuration. Other dialects (SQLite for
local development and tests) get an in-process matcher with the same contract:
every query term must appear, results come back rank descending, then most
recently published first.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, literal, literal_column, select
from sqlalchemy.dialects.postgresql import REGCONFIG
from sqlalchemy.orm import Session

from .. import models

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\w+", re.UNICODE)


@dataclass
class RankedPost:
    post: models.Post
    rank: float


def _document():
    # Same expression as the ix_posts_search GIN index.
    space = literal_column("' '")
    return models.Post.title + space + models.Post.excerpt + space + models.Post.content


def _search_postgres(db: Session, query: str, text_config: str) -> list[RankedPost]:
    config = literal(text_config, type_=REGCONFIG)
    vector = func.to_tsvector(config, _document())
    ts_query = func.plainto_tsquery(config, query)
    rank = func.ts_rank(vector, ts_query).label("rank")

    stmt = (
        select(models.Post, rank)
        .where(
            models.Post.status == "published",
            models.Post.published_at <= func.now(),
            vector.op("@@")(ts_query),
        )
        .order_by(rank.desc(), models.Post.published_at.desc())
    )
    return [RankedPost(post=post, rank=float(score)) for post, score in db.execute(stmt).all()]


def _terms(text: str) -> list[str]:
    return [word.casefold() for word in _WORD_RE.findall(text)]


def _search_portable(db: Session, query: str) -> list[RankedPost]:
    terms = set(_terms(query))
    if not terms:
        return []

    now = datetime.now(timezone.utc)
    candidates = db.execute(
        select(models.Post).where(
            models.Post.status == "published",
            models.Post.published_at.is_not(None),
            models.Post.published_at <= now,
        )
    ).scalars().all()

    ranked: list[RankedPost] = []
    for post in candidates:
        words = _terms(f"{post.title} {post.excerpt} {post.content}")
        if not words:
            continue
        present = set(words)
        if not terms <= present:
            continue
        hits = sum(1 for word in words if word in terms)
        ranked.append(RankedPost(post=post, rank=hits / len(words)))

    def _published(item: RankedPost) -> datetime:
        value = item.post.published_at
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    # Two stable passes: recency first, then rank, gives rank desc / recency desc.
    ranked.sort(key=_published, reverse=True)
    ranked.sort(key=lambda item: item.rank, reverse=True)
    return ranked


def search_posts(db: Session, query: str, text_config: str = "serbian") -> list[RankedPost]:
    """Return published posts matching ``query``, best match first."""
    if not query or not query.strip():
        return []

    query = query.strip()
    if db.get_bind().dialect.name == "postgresql":
        results = _search_postgres(db, query, text_config)
    else:
        results = _search_portable(db, query)

    logger.debug(f"Search {query!r} matched {len(results)} posts")
    return results
