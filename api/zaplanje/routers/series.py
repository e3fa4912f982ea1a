"""Post series endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..store import SqlContentStore
from ..utils.text import generate_slug

router = APIRouter(prefix="/series", tags=["Series"])


def _series_with_posts(store: SqlContentStore, series) -> schemas.Series:
    """Attach the series' posts in order, skipping posts the caller cannot see."""
    entries = store.list("series_posts", {"series_id": series.id}, order=[("order_index", False)])
    visible = {post.id: post for post in store.list("posts")}
    result = schemas.Series.model_validate(
        {**schemas.SeriesBase.model_validate(series).model_dump(), "posts": []}
    )
    for entry in entries:
        post = visible.get(entry.post_id)
        if post is not None:
            result.posts.append(
                schemas.SeriesEntry(order_index=entry.order_index, post=schemas.Post.model_validate(post))
            )
    return result


@router.get("", response_model=list[schemas.SeriesBase])
def list_series(store: SqlContentStore = Depends(get_store)) -> list[schemas.SeriesBase]:
    return [
        schemas.SeriesBase.model_validate(s)
        for s in store.list("post_series", order=[("created_at", True)])
    ]


@router.get("/{slug}", response_model=schemas.Series)
def get_series(slug: str, store: SqlContentStore = Depends(get_store)) -> schemas.Series:
    """Series with its posts in reading order."""
    return _series_with_posts(store, store.find_one("post_series", slug=slug))


@router.post("", response_model=schemas.SeriesBase, status_code=status.HTTP_201_CREATED)
def create_series(
    payload: schemas.SeriesCreate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.SeriesBase:
    values = payload.model_dump()
    values["slug"] = values["slug"] or generate_slug(payload.title)
    return schemas.SeriesBase.model_validate(store.insert("post_series", values))


@router.delete("/{series_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_series(
    series_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> Response:
    store.delete("post_series", series_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{series_id}/posts", response_model=schemas.Series, status_code=status.HTTP_201_CREATED)
def add_series_post(
    series_id: UUID,
    payload: schemas.SeriesPostAdd,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Series:
    """
    Place a post in a series at ``order_index``.

    A post appears at most once per series and no two posts share a position;
    both are enforced by unique constraints (409 on conflict).
    """
    series = store.get("post_series", series_id)
    store.insert(
        "series_posts",
        {"series_id": series_id, "post_id": payload.post_id, "order_index": payload.order_index},
    )
    return _series_with_posts(store, series)


@router.delete("/{series_id}/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_series_post(
    series_id: UUID,
    post_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> Response:
    entry = store.find_one("series_posts", series_id=series_id, post_id=post_id)
    store.delete("series_posts", entry.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
