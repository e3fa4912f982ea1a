"""Row access policies.

Each table carries a list of permissive policies. A policy applies to an action
for a role; ``using`` narrows which existing rows it exposes (SQL predicate) and
``check`` decides whether a new or modified row may be written. Access is
granted when any applicable policy allows it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable
from uuid import UUID

from sqlalchemy import false, or_, true
from sqlalchemy.sql.elements import ColumnElement

ALL_ACTIONS = frozenset({"select", "insert", "update", "delete"})


@dataclass(frozen=True)
class Principal:
    """Caller identity as seen by the store."""

    user_id: UUID | None = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Principal()

SqlPredicate = Callable[[Any, Principal], ColumnElement[bool]]
RowCheck = Callable[[Principal, Any], bool]


@dataclass(frozen=True)
class Policy:
    name: str
    actions: frozenset[str]
    role: str = "public"  # "public" or "authenticated"
    using: SqlPredicate | None = None
    check: RowCheck | None = None

    def applies_to(self, action: str, principal: Principal) -> bool:
        if action not in self.actions:
            return False
        return self.role == "public" or principal.authenticated


# ----------------------------------------------------------------------------
# Predicates
# ----------------------------------------------------------------------------


def published_posts(model, principal: Principal) -> ColumnElement[bool]:
    return (
        (model.status == "published")
        & model.published_at.is_not(None)
        & (model.published_at <= datetime.now(timezone.utc))
    )


def approved_comments(model, principal: Principal) -> ColumnElement[bool]:
    return model.status == "approved"


def own_rows(model, principal: Principal) -> ColumnElement[bool]:
    if principal.user_id is None:
        return false()
    return model.user_id == principal.user_id


def owns_row(principal: Principal, row: Any) -> bool:
    return principal.user_id is not None and getattr(row, "user_id", None) == principal.user_id


def is_unsubscribe(principal: Principal, row: Any) -> bool:
    return getattr(row, "status", None) == "unsubscribed"


def _public_read(table: str) -> Policy:
    return Policy(f"{table} are viewable by everyone", frozenset({"select"}))


def _authenticated_manage(table: str) -> Policy:
    return Policy(f"{table} can be managed by authenticated users", ALL_ACTIONS, role="authenticated")


POLICIES: dict[str, list[Policy]] = {
    "authors": [_public_read("Authors"), _authenticated_manage("Authors")],
    "posts": [
        Policy("Published posts are viewable by everyone", frozenset({"select"}), using=published_posts),
        _authenticated_manage("Posts"),
    ],
    "categories": [_public_read("Categories"), _authenticated_manage("Categories")],
    "post_categories": [_public_read("Post categories"), _authenticated_manage("Post categories")],
    "comments": [
        Policy("Approved comments are viewable by everyone", frozenset({"select"}), using=approved_comments),
        Policy("Anyone can submit comments", frozenset({"insert"})),
        _authenticated_manage("Comments"),
    ],
    "newsletter_subscriptions": [
        _authenticated_manage("Newsletter subscriptions"),
        Policy("Anyone can subscribe to newsletter", frozenset({"insert"})),
        Policy("Anyone can unsubscribe", frozenset({"update"}), check=is_unsubscribe),
    ],
    "post_series": [_public_read("Post series"), _authenticated_manage("Post series")],
    "series_posts": [_public_read("Series posts"), _authenticated_manage("Series posts")],
    "user_bookmarks": [
        Policy(
            "Users can manage their own bookmarks",
            ALL_ACTIONS,
            using=own_rows,
            check=owns_row,
        ),
    ],
    "post_views": [
        _public_read("Post views"),
        Policy("Anyone can record post views", frozenset({"insert"})),
    ],
}


def _applicable(table: str, action: str, principal: Principal) -> Iterable[Policy]:
    return [p for p in POLICIES.get(table, []) if p.applies_to(action, principal)]


def row_filter(model, action: str, principal: Principal) -> ColumnElement[bool]:
    """SQL predicate selecting the rows ``principal`` may ``action``."""
    clauses = []
    for policy in _applicable(model.__tablename__, action, principal):
        if policy.using is None:
            return true()
        clauses.append(policy.using(model, principal))
    if not clauses:
        return false()
    return or_(*clauses)


def can_write(table: str, action: str, principal: Principal, row: Any) -> bool:
    """Whether ``row`` passes the write check of any applicable policy."""
    for policy in _applicable(table, action, principal):
        if policy.check is None or policy.check(principal, row):
            return True
    return False
