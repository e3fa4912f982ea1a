"""Post listing: eligibility, category and featured filters, and ordering.

Everything here is a pure function over already-fetched rows, so the same code
serves the ``GET /posts`` endpoint (ORM rows) and the reader client (pydantic
schemas).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

ALL_CATEGORIES = "all"
SORT_KEYS = ("newest", "oldest", "popular")


@dataclass(frozen=True)
class ListingFilter:
    """Reader-selected listing options."""

    category_id: Any = ALL_CATEGORIES
    featured_only: bool = False
    sort_key: str = "newest"

    def __post_init__(self) -> None:
        if self.sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key {self.sort_key!r}; expected one of {SORT_KEYS}")


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _as_key(value: Any) -> str:
    return str(value)


def build_category_index(links: Iterable[Any]) -> dict[str, frozenset[str]]:
    """Map post id -> ids of the categories it belongs to.

    ``links`` are post_categories rows (objects or mappings with ``post_id`` and
    ``category_id``). Ids are normalised to strings so UUIDs and their JSON
    form compare equal.
    """
    index: dict[str, set[str]] = defaultdict(set)
    for link in links:
        if isinstance(link, Mapping):
            post_id, category_id = link["post_id"], link["category_id"]
        else:
            post_id, category_id = link.post_id, link.category_id
        index[_as_key(post_id)].add(_as_key(category_id))
    return {post_id: frozenset(ids) for post_id, ids in index.items()}


def is_listable(post: Any, as_of: datetime | None = None) -> bool:
    if post.status != "published" or post.published_at is None:
        return False
    if as_of is not None and _utc(post.published_at) > _utc(as_of):
        return False
    return True


def _recency(post: Any) -> datetime:
    return _utc(post.published_at or post.created_at)


def derive_visible_list(
    posts: Sequence[Any],
    categories: Sequence[Any],
    category_index: Mapping[str, frozenset[str]],
    listing_filter: ListingFilter,
    as_of: datetime | None = None,
) -> list[Any]:
    """
    Derive the ordered list of posts to show for ``listing_filter``.

    Steps:
    1. Keep published posts with a publication time (and, when ``as_of`` is
       given, only those published at or before it).
    2. Unless the filter says "all", keep posts filed under the selected
       category. A category id that matches nothing in ``categories`` leaves
       the list unfiltered.
    3. Optionally keep featured posts only.
    4. Order by recency (newest/oldest) or by view count (popular). The sort
       is stable: equal keys keep their input order.

    The inputs are not modified.
    """
    visible = [post for post in posts if is_listable(post, as_of)]

    if listing_filter.category_id != ALL_CATEGORIES:
        wanted = _as_key(listing_filter.category_id)
        if any(_as_key(category.id) == wanted for category in categories):
            visible = [
                post
                for post in visible
                if wanted in category_index.get(_as_key(post.id), frozenset())
            ]

    if listing_filter.featured_only:
        visible = [post for post in visible if post.featured]

    if listing_filter.sort_key == "newest":
        visible.sort(key=_recency, reverse=True)
    elif listing_filter.sort_key == "oldest":
        visible.sort(key=_recency)
    else:
        visible.sort(key=lambda post: post.view_count, reverse=True)

    return visible
