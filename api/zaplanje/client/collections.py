"""Stateful views over the content store for a reader-facing front end.

Each collection holds ``items`` plus ``loading``/``error`` flags. Fetch
failures are recorded and swallowed; mutation failures are recorded and
re-raised. A successful mutation patches ``items`` with the row the store
returned, so no refetch is needed; ``refetch()`` remains available to
reconcile with the server.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar
from uuid import UUID

from .. import schemas
from .api import ContentClient, ContentStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Collection(Generic[T]):
    def __init__(self, client: ContentClient):
        self.client = client
        self.items: list[T] = []
        self.loading = False
        self.error: str | None = None

    async def _load(self) -> list[T]:
        raise NotImplementedError

    async def refetch(self) -> list[T]:
        self.loading = True
        self.error = None
        try:
            self.items = await self._load()
        except ContentStoreError as exc:
            logger.warning(f"{type(self).__name__} fetch failed: {exc.message}")
            self.error = exc.message
        finally:
            self.loading = False
        return self.items

    async def _mutate(self, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            result = await call()
        except ContentStoreError as exc:
            self.error = exc.message
            raise
        self.error = None
        return result

    def _replace(self, row: Any) -> None:
        self.items = [row if item.id == row.id else item for item in self.items]

    def _remove(self, row_id: UUID | str) -> None:
        self.items = [item for item in self.items if str(item.id) != str(row_id)]


class AuthorsCollection(_Collection[schemas.Author]):
    """Authors, newest first."""

    async def _load(self) -> list[schemas.Author]:
        return await self.client.list_authors()

    async def add(self, values: dict[str, Any]) -> schemas.Author:
        author = await self._mutate(lambda: self.client.create_author(values))
        self.items = [author, *self.items]
        return author

    async def update(self, author_id: UUID | str, values: dict[str, Any]) -> schemas.Author:
        author = await self._mutate(lambda: self.client.update_author(author_id, values))
        self._replace(author)
        return author

    async def delete(self, author_id: UUID | str) -> None:
        await self._mutate(lambda: self.client.delete_author(author_id))
        self._remove(author_id)


class PostsCollection(_Collection[schemas.Post]):
    """Every post the caller may read (drafts included for editors), latest publication first."""

    async def _load(self) -> list[schemas.Post]:
        return await self.client.list_all_posts()

    async def add(self, values: dict[str, Any]) -> schemas.Post:
        post = await self._mutate(lambda: self.client.create_post(values))
        self.items = [post, *self.items]
        return post

    async def update(self, post_id: UUID | str, values: dict[str, Any]) -> schemas.Post:
        post = await self._mutate(lambda: self.client.update_post(post_id, values))
        self._replace(post)
        return post

    async def delete(self, post_id: UUID | str) -> None:
        await self._mutate(lambda: self.client.delete_post(post_id))
        self._remove(post_id)

    async def increment_view_count(
        self,
        post_id: UUID | str,
        user_agent: str | None = None,
        referrer: str | None = None,
    ) -> int:
        """Record a view and set the cached post's count to the server's value."""
        view_count = await self._mutate(
            lambda: self.client.increment_view(post_id, user_agent=user_agent, referrer=referrer)
        )
        self.items = [
            item.model_copy(update={"view_count": view_count}) if str(item.id) == str(post_id) else item
            for item in self.items
        ]
        return view_count


class CategoriesCollection(_Collection[schemas.Category]):
    async def _load(self) -> list[schemas.Category]:
        return await self.client.list_categories()

    async def add(self, values: dict[str, Any]) -> schemas.Category:
        category = await self._mutate(lambda: self.client.create_category(values))
        self.items = sorted([*self.items, category], key=lambda c: c.name)
        return category


class CommentsCollection(_Collection[schemas.Comment]):
    """Approved comments of one post, oldest first."""

    def __init__(self, client: ContentClient, post_id: UUID | str):
        super().__init__(client)
        self.post_id = post_id

    async def _load(self) -> list[schemas.Comment]:
        return await self.client.list_comments(self.post_id)

    async def add(self, values: dict[str, Any]) -> schemas.Comment:
        """
        Submit a comment for moderation.

        The comment is not added to ``items``: only approved comments are
        listed, and a new one starts out pending.
        """
        return await self._mutate(lambda: self.client.submit_comment(self.post_id, values))


class NewsletterSubscriptions(_Collection[schemas.NewsletterSubscription]):
    """Subscriber list (needs an authenticated client) plus public subscribe/unsubscribe."""

    async def _load(self) -> list[schemas.NewsletterSubscription]:
        return await self.client.list_subscriptions()

    async def subscribe(self, email: str, name: str | None = None) -> schemas.NewsletterSubscription:
        subscription = await self._mutate(lambda: self.client.subscribe(email, name))
        self.items = [subscription, *self.items]
        return subscription

    async def unsubscribe(self, email: str) -> None:
        await self._mutate(lambda: self.client.unsubscribe(email))
        wanted = email.lower()
        self.items = [
            item.model_copy(update={"status": "unsubscribed"}) if item.email == wanted else item
            for item in self.items
        ]
