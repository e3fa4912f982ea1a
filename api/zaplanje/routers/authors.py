"""Author endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from .. import schemas
from ..auth import require_authenticated
from ..deps import get_store
from ..store import SqlContentStore

router = APIRouter(prefix="/authors", tags=["Authors"])


@router.get("", response_model=list[schemas.Author])
def list_authors(store: SqlContentStore = Depends(get_store)) -> list[schemas.Author]:
    """List authors, newest first."""
    return [
        schemas.Author.model_validate(a)
        for a in store.list("authors", order=[("created_at", True)])
    ]


@router.get("/{author_id}", response_model=schemas.Author)
def get_author(author_id: UUID, store: SqlContentStore = Depends(get_store)) -> schemas.Author:
    return schemas.Author.model_validate(store.get("authors", author_id))


@router.post("", response_model=schemas.Author, status_code=status.HTTP_201_CREATED)
def create_author(
    payload: schemas.AuthorCreate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Author:
    values = payload.model_dump()
    values["email"] = values["email"].lower()
    return schemas.Author.model_validate(store.insert("authors", values))


@router.patch("/{author_id}", response_model=schemas.Author)
def update_author(
    author_id: UUID,
    payload: schemas.AuthorUpdate,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> schemas.Author:
    """Update only the fields present in the request body."""
    values = payload.model_dump(exclude_unset=True)
    if values.get("email"):
        values["email"] = values["email"].lower()
    return schemas.Author.model_validate(store.update("authors", author_id, values))


@router.delete("/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_author(
    author_id: UUID,
    store: SqlContentStore = Depends(get_store),
    _=Depends(require_authenticated),
) -> Response:
    store.delete("authors", author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
