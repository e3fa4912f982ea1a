"""Reader bookmarks. Each reader sees and manages only their own."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..policies import Principal
from ..store import SqlContentStore

router = APIRouter(prefix="/bookmarks", tags=["Bookmarks"])


@router.get("", response_model=list[schemas.Bookmark])
def list_bookmarks(
    store: SqlContentStore = Depends(get_store),
    _: Principal = Depends(require_authenticated),
) -> list[schemas.Bookmark]:
    return [
        schemas.Bookmark.model_validate(b)
        for b in store.list("user_bookmarks", order=[("created_at", True)])
    ]


@router.post("", response_model=schemas.Bookmark, status_code=status.HTTP_201_CREATED)
def add_bookmark(
    payload: schemas.BookmarkCreate,
    store: SqlContentStore = Depends(get_store),
    principal: Principal = Depends(require_authenticated),
) -> schemas.Bookmark:
    bookmark = store.insert(
        "user_bookmarks", {"user_id": principal.user_id, "post_id": payload.post_id}
    )
    return schemas.Bookmark.model_validate(bookmark)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_bookmark(
    post_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _: Principal = Depends(require_authenticated),
) -> Response:
    bookmark = store.find_one("user_bookmarks", post_id=post_id)
    store.delete("user_bookmarks", bookmark.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
