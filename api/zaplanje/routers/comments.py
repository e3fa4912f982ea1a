"""Comment endpoints: public threads, open submission, moderation."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..errors import NotFoundError
from ..store import SqlContentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["Comments"])


def build_comment_tree(comments: list) -> list[schemas.Comment]:
    """Nest comments under their parents, oldest first at every level.

    Replies whose parent is not in ``comments`` (not approved, or gone) are
    dropped along with their own replies.
    """
    nodes = {c.id: schemas.Comment.model_validate(c) for c in comments}
    roots: list[schemas.Comment] = []
    for comment in comments:
        node = nodes[comment.id]
        if comment.parent_id is None:
            roots.append(node)
        elif comment.parent_id in nodes:
            nodes[comment.parent_id].children.append(node)
    return roots


@router.get("/posts/{post_id}/comments", response_model=list[schemas.Comment])
def list_comments(
    post_id: UUID,
    view: str = Query("flat", pattern="^(flat|tree)$"),
    store: SqlContentStore = Depends(get_store),
) -> list[schemas.Comment]:
    """
    List approved comments for a post, oldest first.

    ``view=tree`` nests replies under their parents.
    """
    comments = store.list(
        "comments",
        {"post_id": post_id, "status": "approved"},
        order=[("created_at", False)],
    )
    if view == "tree":
        return build_comment_tree(comments)
    return [schemas.Comment.model_validate(c) for c in comments]


@router.post(
    "/posts/{post_id}/comments",
    response_model=schemas.Comment,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: UUID,
    payload: schemas.CommentCreate,
    store: SqlContentStore = Depends(get_store),
) -> schemas.Comment:
    """
    Submit a comment. It stays pending until a moderator approves it.

    **Public endpoint** - No authentication required.
    """
    if payload.parent_id is not None:
        try:
            parent = store.get("comments", payload.parent_id)
        except NotFoundError:
            parent = None
        if parent is None or parent.post_id != post_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent comment does not belong to this post",
            )

    values = payload.model_dump()
    values["post_id"] = post_id
    values["status"] = "pending"
    comment = store.insert("comments", values)
    logger.info(f"Comment {comment.id} submitted for post {post_id}, awaiting moderation")
    return schemas.Comment.model_validate(comment)


@router.get("/comments", response_model=list[schemas.Comment])
def list_comments_for_moderation(
    status_filter: schemas.CommentStatus = Query("pending", alias="status"),
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> list[schemas.Comment]:
    """Moderation queue."""
    comments = store.list("comments", {"status": status_filter}, order=[("created_at", False)])
    return [schemas.Comment.model_validate(c) for c in comments]


@router.patch("/comments/{comment_id}", response_model=schemas.Comment)
def moderate_comment(
    comment_id: UUID,
    payload: schemas.CommentModerate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Comment:
    comment = store.update("comments", comment_id, {"status": payload.status})
    logger.info(f"Comment {comment_id} moderated: {payload.status}")
    return schemas.Comment.model_validate(comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> Response:
    """Delete a comment together with all of its replies."""
    store.delete("comments", comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
