"""Post endpoints: filtered listing, lookup, management and view recording."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..listing import ALL_CATEGORIES, ListingFilter, build_category_index, derive_visible_list
from ..store import SqlContentStore
from ..utils.text import estimate_reading_time, extract_plain_text, generate_slug, truncate_text
from ..utils.view_tracking import get_client_ip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

EXCERPT_LENGTH = 200


@router.get("", response_model=list[schemas.Post])
def list_posts(
    category: str = Query(ALL_CATEGORIES, description="Category id, or 'all'"),
    featured: bool = False,
    sort: schemas.SortKey = "newest",
    view: str = Query("listing", pattern="^(listing|all)$"),
    store: SqlContentStore = Depends(get_store),
) -> list[schemas.Post]:
    """
    List publicly visible posts.

    Sort options:
    - newest: most recently published first
    - oldest: earliest published first
    - popular: most viewed first

    ``view=all`` skips the listing rules and returns every post the caller
    may read (editors see drafts too), latest publication first.
    """
    posts = store.list("posts", order=[("published_at", True)])
    if view == "all":
        return [schemas.Post.model_validate(p) for p in posts]

    categories = store.list("categories")
    category_index = build_category_index(store.list("post_categories"))

    visible = derive_visible_list(
        posts,
        categories,
        category_index,
        ListingFilter(category_id=category, featured_only=featured, sort_key=sort),
        as_of=datetime.now(timezone.utc),
    )
    return [schemas.Post.model_validate(p) for p in visible]


@router.get("/by-slug/{slug}", response_model=schemas.Post)
def get_post_by_slug(slug: str, store: SqlContentStore = Depends(get_store)) -> schemas.Post:
    return schemas.Post.model_validate(store.find_one("posts", slug=slug))


@router.get("/{post_id}", response_model=schemas.Post)
def get_post(post_id: UUID, store: SqlContentStore = Depends(get_store)) -> schemas.Post:
    return schemas.Post.model_validate(store.get("posts", post_id))


@router.post("", response_model=schemas.Post, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: schemas.PostCreate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Post:
    """
    Create a post.

    Missing slug, excerpt and reading time are derived from the title and
    content. A post created as published without a publication time is
    published now.
    """
    values = payload.model_dump()
    plain_text = extract_plain_text(payload.content)

    if not values["slug"]:
        values["slug"] = generate_slug(payload.title) or uuid.uuid4().hex[:12]
    if values["excerpt"] is None:
        values["excerpt"] = truncate_text(plain_text, EXCERPT_LENGTH)
    if values["reading_time"] is None:
        values["reading_time"] = estimate_reading_time(plain_text)
    if values["status"] == "published" and values["published_at"] is None:
        values["published_at"] = datetime.now(timezone.utc)

    post = store.insert("posts", values)
    return schemas.Post.model_validate(post)


@router.patch("/{post_id}", response_model=schemas.Post)
def update_post(
    post_id: UUID,
    payload: schemas.PostUpdate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Post:
    """Update only the fields present in the request body."""
    post = store.update("posts", post_id, payload.model_dump(exclude_unset=True))
    return schemas.Post.model_validate(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> Response:
    store.delete("posts", post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}/categories", response_model=list[schemas.Category])
def list_post_categories(
    post_id: UUID,
    store: SqlContentStore = Depends(get_store),
) -> list[schemas.Category]:
    store.get("posts", post_id)
    links = store.list("post_categories", {"post_id": post_id})
    wanted = {link.category_id for link in links}
    categories = store.list("categories", order=[("name", False)])
    return [schemas.Category.model_validate(c) for c in categories if c.id in wanted]


@router.put("/{post_id}/categories", response_model=list[schemas.PostCategoryLink])
def set_post_categories(
    post_id: UUID,
    payload: schemas.PostCategoryAssign,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> list[schemas.PostCategoryLink]:
    """Replace the set of categories a post is filed under."""
    store.get("posts", post_id)
    wanted = list(dict.fromkeys(payload.category_ids))

    existing = store.list("post_categories", {"post_id": post_id})
    for link in existing:
        if link.category_id not in wanted:
            store.delete("post_categories", link.id)

    kept = {link.category_id for link in existing}
    for category_id in wanted:
        if category_id not in kept:
            store.insert("post_categories", {"post_id": post_id, "category_id": category_id})

    links = store.list("post_categories", {"post_id": post_id})
    return [schemas.PostCategoryLink.model_validate(link) for link in links]


@router.post("/{post_id}/views", response_model=schemas.ViewRecordResponse)
def record_post_view(
    post_id: UUID,
    request: Request,
    payload: schemas.ViewRecordRequest | None = None,
    store: SqlContentStore = Depends(get_store),
) -> schemas.ViewRecordResponse:
    """
    Record one view of a post and bump its view counter.

    **Public endpoint** - No authentication required. The viewer address is
    taken from the request, never from the body.
    """
    payload = payload or schemas.ViewRecordRequest()
    view_count = store.call(
        "increment_view",
        {
            "post_id": post_id,
            "viewer_ip": get_client_ip(request),
            "user_agent": payload.user_agent or request.headers.get("User-Agent"),
            "referrer": payload.referrer,
        },
    )
    return schemas.ViewRecordResponse(post_id=post_id, view_count=view_count)
