"""Full-text search endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .. import schemas
from ..deps import get_store
from ..store import SqlContentStore

router = APIRouter(prefix="", tags=["Search"])


@router.get("/search", response_model=list[schemas.SearchResult])
def search_posts(
    q: str = "",
    store: SqlContentStore = Depends(get_store),
) -> list[schemas.SearchResult]:
    """
    Ranked full-text search over published posts.

    Results are ordered by rank, then by publication time, both descending.
    A blank query returns an empty list.
    """
    if not q.strip():
        return []

    return [
        schemas.SearchResult.model_validate(
            {**schemas.Post.model_validate(hit.post).model_dump(), "rank": hit.rank}
        )
        for hit in store.call("search", {"query": q})
    ]
