"""Category endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..store import SqlContentStore
from ..utils.text import generate_slug

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[schemas.Category])
def list_categories(store: SqlContentStore = Depends(get_store)) -> list[schemas.Category]:
    """List all categories alphabetically."""
    return [
        schemas.Category.model_validate(c)
        for c in store.list("categories", order=[("name", False)])
    ]


@router.get("/links", response_model=list[schemas.PostCategoryLink])
def list_category_links(store: SqlContentStore = Depends(get_store)) -> list[schemas.PostCategoryLink]:
    """Every post/category pairing, for building the listing's category index."""
    return [schemas.PostCategoryLink.model_validate(link) for link in store.list("post_categories")]


@router.get("/{slug}", response_model=schemas.Category)
def get_category(slug: str, store: SqlContentStore = Depends(get_store)) -> schemas.Category:
    return schemas.Category.model_validate(store.find_one("categories", slug=slug))


@router.post("", response_model=schemas.Category, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: schemas.CategoryCreate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Category:
    values = payload.model_dump()
    values["slug"] = values["slug"] or generate_slug(payload.name)
    return schemas.Category.model_validate(store.insert("categories", values))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> Response:
    """Delete a category. Its post links go with it."""
    store.delete("categories", category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
