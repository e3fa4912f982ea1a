"""SQL-backed content store.

One object per request/session. Every table operation goes through the access
policies in :mod:`policies`; the two procedures (``increment_view`` and
``search``) run with store privileges, like database functions would.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .errors import ConstraintViolation, NotFoundError, PermissionDenied, StoreError
from .policies import ANONYMOUS, Principal, can_write, row_filter
from .services.search import RankedPost, search_posts
from .services.view_counter import increment_post_view_count

logger = logging.getLogger(__name__)

ENTITIES: dict[str, type] = {
    "authors": models.Author,
    "posts": models.Post,
    "categories": models.Category,
    "post_categories": models.PostCategory,
    "comments": models.Comment,
    "newsletter_subscriptions": models.NewsletterSubscription,
    "post_series": models.PostSeries,
    "series_posts": models.SeriesPost,
    "user_bookmarks": models.UserBookmark,
    "post_views": models.PostView,
}

# Columns the store assigns itself.
READ_ONLY_COLUMNS = frozenset({"id", "created_at", "updated_at"})

PROCEDURES = ("increment_view", "search")


def _model_for(entity: str):
    try:
        return ENTITIES[entity]
    except KeyError:
        raise NotFoundError(f"relation {entity!r} not found") from None


def _coerce_id(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(f"Row {value!r} not found") from None


def _constraint_error(exc: IntegrityError) -> ConstraintViolation:
    raw = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = raw.lower()
    if "duplicate key" in lowered or "foreign key" in lowered:
        message = raw
    elif "unique" in lowered:
        message = f"duplicate key value violates unique constraint ({raw})"
    else:
        message = f"constraint violation ({raw})"
    return ConstraintViolation(message)


class SqlContentStore:
    """Content store over a SQLAlchemy session, acting on behalf of one principal."""

    def __init__(
        self,
        db: Session,
        principal: Principal = ANONYMOUS,
        search_text_config: str = "serbian",
    ):
        self.db = db
        self.principal = principal
        self.search_text_config = search_text_config

    def as_principal(self, principal: Principal) -> "SqlContentStore":
        return SqlContentStore(self.db, principal, self.search_text_config)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(
        self,
        entity: str,
        filters: dict[str, Any] | None = None,
        order: Iterable[tuple[str, bool]] | None = None,
    ) -> list[Any]:
        """Return every row of ``entity`` visible to the principal.

        ``filters`` are column equality tests; ``order`` is a sequence of
        ``(column, descending)`` pairs.
        """
        model = _model_for(entity)
        stmt = select(model).where(row_filter(model, "select", self.principal))
        for column, value in (filters or {}).items():
            stmt = stmt.where(self._column(model, column) == value)
        for column, descending in order or ():
            col = self._column(model, column)
            stmt = stmt.order_by(col.desc().nulls_last() if descending else col.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get(self, entity: str, row_id: Any) -> Any:
        return self._locate(_model_for(entity), row_id, "select")

    def find_one(self, entity: str, **filters: Any) -> Any:
        rows = self.list(entity, filters)
        if not rows:
            raise NotFoundError(f"{entity} row not found")
        return rows[0]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, entity: str, values: dict[str, Any]) -> Any:
        model = _model_for(entity)
        self._check_columns(model, values)
        row = model(**values)
        if not can_write(entity, "insert", self.principal, row):
            raise PermissionDenied(f"permission denied for table {entity}")
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        logger.info(f"Inserted {entity} row {row.id}")
        return row

    def update(self, entity: str, row_id: Any, values: dict[str, Any]) -> Any:
        """Apply a partial update: only the keys present in ``values`` change."""
        model = _model_for(entity)
        self._check_columns(model, values)
        row = self._locate(model, row_id, "update")
        for column, value in values.items():
            setattr(row, column, value)
        if not can_write(entity, "update", self.principal, row):
            self.db.rollback()
            raise PermissionDenied(f"permission denied for table {entity}")
        self._commit()
        self.db.refresh(row)
        logger.info(f"Updated {entity} row {row.id}: {sorted(values)}")
        return row

    def update_where(self, entity: str, filters: dict[str, Any], values: dict[str, Any]) -> list[Any]:
        """Partial update of every row matching ``filters``; returns the updated rows."""
        model = _model_for(entity)
        self._check_columns(model, values)
        stmt = select(model).where(row_filter(model, "update", self.principal))
        for column, value in filters.items():
            stmt = stmt.where(self._column(model, column) == value)
        rows = list(self.db.execute(stmt).scalars().all())
        for row in rows:
            for column, value in values.items():
                setattr(row, column, value)
            if not can_write(entity, "update", self.principal, row):
                self.db.rollback()
                raise PermissionDenied(f"permission denied for table {entity}")
        self._commit()
        logger.info(f"Updated {len(rows)} {entity} rows: {sorted(values)}")
        return rows

    def delete(self, entity: str, row_id: Any) -> None:
        model = _model_for(entity)
        row = self._locate(model, row_id, "delete")
        self.db.delete(row)
        self._commit()
        logger.info(f"Deleted {entity} row {row_id}")

    # ------------------------------------------------------------------
    # Procedures
    # ------------------------------------------------------------------

    def call(self, procedure: str, params: dict[str, Any]) -> Any:
        if procedure not in PROCEDURES:
            raise NotFoundError(f"function {procedure} not found")
        if procedure == "increment_view":
            return increment_post_view_count(
                self.db,
                _coerce_id(params["post_id"]),
                viewer_ip=params.get("viewer_ip"),
                user_agent=params.get("user_agent"),
                referrer=params.get("referrer"),
            )
        return self.search(params.get("query") or "")

    def search(self, query: str) -> list[RankedPost]:
        return search_posts(self.db, query, self.search_text_config)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _column(model, name: str):
        if name not in inspect(model).columns:
            raise StoreError(f"column {model.__tablename__}.{name} does not exist")
        return getattr(model, name)

    @staticmethod
    def _check_columns(model, values: dict[str, Any]) -> None:
        columns = inspect(model).columns
        for name in values:
            if name not in columns:
                raise StoreError(f"column {model.__tablename__}.{name} does not exist")
            if name in READ_ONLY_COLUMNS:
                raise StoreError(f"column {model.__tablename__}.{name} is read-only")

    def _locate(self, model, row_id: Any, action: str) -> Any:
        stmt = (
            select(model)
            .where(model.id == _coerce_id(row_id))
            .where(row_filter(model, action, self.principal))
        )
        row = self.db.execute(stmt).scalars().first()
        if row is None:
            raise NotFoundError(f"{model.__tablename__} row {row_id} not found")
        return row

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Write rejected by constraint: {exc.orig}")
            raise _constraint_error(exc) from exc
