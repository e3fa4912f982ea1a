"""Post view counting.

A view is one ``post_views`` row plus a +1 on ``posts.view_count``, written in a
single transaction. The counter is bumped with an in-database increment, never
read-modify-write, so concurrent views of the same post are all counted.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .. import models
from ..errors import NotFoundError

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 1000
MAX_REFERRER_LENGTH = 2000


def increment_post_view_count(
    db: Session,
    post_id: UUID,
    viewer_ip: str | None = None,
    user_agent: str | None = None,
    referrer: str | None = None,
) -> int:
    """
    Record a view of ``post_id`` and return the post's new view count.

    Raises:
        NotFoundError: the post does not exist
    """
    try:
        result = db.execute(
            update(models.Post)
            .where(models.Post.id == post_id)
            .values(view_count=models.Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"Post {post_id} not found")

        db.add(
            models.PostView(
                post_id=post_id,
                viewer_ip=viewer_ip or None,
                user_agent=(user_agent or None) and user_agent[:MAX_USER_AGENT_LENGTH],
                referrer=(referrer or None) and referrer[:MAX_REFERRER_LENGTH],
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    view_count = db.execute(
        select(models.Post.view_count).where(models.Post.id == post_id)
    ).scalar_one()
    logger.info(f"Recorded view for post {post_id}: view_count={view_count}")
    return view_count
