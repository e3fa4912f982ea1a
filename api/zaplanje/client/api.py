"""HTTP access to the content store.

``ContentClient`` is created explicitly and handed to whatever needs it; there
is no module-level instance. Every failure, transport or HTTP, surfaces as a
``ContentStoreError`` carrying one message fit to show a reader.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx

from .. import schemas
from ..errors import describe_error

logger = logging.getLogger(__name__)


class ContentStoreError(Exception):
    """A content store call failed."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


@dataclass
class ClientSettings:
    api_url: str
    access_token: str | None = None

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Read ZAPLANJE_API_URL (required) and ZAPLANJE_ACCESS_TOKEN."""
        api_url = os.getenv("ZAPLANJE_API_URL")
        if not api_url:
            raise RuntimeError("ZAPLANJE_API_URL must be set to the content API base URL.")
        return cls(api_url=api_url.rstrip("/"), access_token=os.getenv("ZAPLANJE_ACCESS_TOKEN") or None)


def _detail_of(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    # Validation errors come back as a list of problems
    return response.reason_phrase


class ContentClient:
    """Async client for the content API."""

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._http = httpx.AsyncClient(base_url=base_url, headers=headers, transport=transport)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> "ContentClient":
        return cls(settings.api_url, access_token=settings.access_token, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ContentClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise ContentStoreError(describe_error(str(exc) or None)) from exc

        if response.is_error:
            detail = _detail_of(response)
            logger.info(f"{method} {path} -> {response.status_code}: {detail}")
            raise ContentStoreError(describe_error(detail), response.status_code, detail)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Posts

    async def list_posts(
        self,
        category: UUID | str = "all",
        featured: bool = False,
        sort: schemas.SortKey = "newest",
    ) -> list[schemas.Post]:
        rows = await self._request(
            "GET",
            "/posts",
            params={"category": str(category), "featured": featured, "sort": sort},
        )
        return [schemas.Post.model_validate(row) for row in rows]

    async def list_all_posts(self) -> list[schemas.Post]:
        """Every post the caller may read, without the listing rules."""
        rows = await self._request("GET", "/posts", params={"view": "all"})
        return [schemas.Post.model_validate(row) for row in rows]

    async def get_post(self, post_id: UUID | str) -> schemas.Post:
        return schemas.Post.model_validate(await self._request("GET", f"/posts/{post_id}"))

    async def get_post_by_slug(self, slug: str) -> schemas.Post:
        return schemas.Post.model_validate(await self._request("GET", f"/posts/by-slug/{slug}"))

    async def create_post(self, values: dict[str, Any]) -> schemas.Post:
        return schemas.Post.model_validate(await self._request("POST", "/posts", json=values))

    async def update_post(self, post_id: UUID | str, values: dict[str, Any]) -> schemas.Post:
        return schemas.Post.model_validate(
            await self._request("PATCH", f"/posts/{post_id}", json=values)
        )

    async def delete_post(self, post_id: UUID | str) -> None:
        await self._request("DELETE", f"/posts/{post_id}")

    async def increment_view(
        self,
        post_id: UUID | str,
        user_agent: str | None = None,
        referrer: str | None = None,
    ) -> int:
        """Record one view; returns the post's new view count."""
        body = await self._request(
            "POST",
            f"/posts/{post_id}/views",
            json={"user_agent": user_agent, "referrer": referrer},
        )
        return schemas.ViewRecordResponse.model_validate(body).view_count

    async def search(self, query: str) -> list[schemas.SearchResult]:
        rows = await self._request("GET", "/search", params={"q": query})
        return [schemas.SearchResult.model_validate(row) for row in rows]

    # Categories

    async def list_categories(self) -> list[schemas.Category]:
        return [schemas.Category.model_validate(row) for row in await self._request("GET", "/categories")]

    async def create_category(self, values: dict[str, Any]) -> schemas.Category:
        return schemas.Category.model_validate(await self._request("POST", "/categories", json=values))

    async def list_post_categories(self) -> list[schemas.PostCategoryLink]:
        rows = await self._request("GET", "/categories/links")
        return [schemas.PostCategoryLink.model_validate(row) for row in rows]

    # Authors

    async def list_authors(self) -> list[schemas.Author]:
        return [schemas.Author.model_validate(row) for row in await self._request("GET", "/authors")]

    async def create_author(self, values: dict[str, Any]) -> schemas.Author:
        return schemas.Author.model_validate(await self._request("POST", "/authors", json=values))

    async def update_author(self, author_id: UUID | str, values: dict[str, Any]) -> schemas.Author:
        return schemas.Author.model_validate(
            await self._request("PATCH", f"/authors/{author_id}", json=values)
        )

    async def delete_author(self, author_id: UUID | str) -> None:
        await self._request("DELETE", f"/authors/{author_id}")

    # Comments

    async def list_comments(self, post_id: UUID | str) -> list[schemas.Comment]:
        rows = await self._request("GET", f"/posts/{post_id}/comments")
        return [schemas.Comment.model_validate(row) for row in rows]

    async def submit_comment(self, post_id: UUID | str, values: dict[str, Any]) -> schemas.Comment:
        return schemas.Comment.model_validate(
            await self._request("POST", f"/posts/{post_id}/comments", json=values)
        )

    # Newsletter

    async def list_subscriptions(self) -> list[schemas.NewsletterSubscription]:
        rows = await self._request("GET", "/newsletter/subscriptions")
        return [schemas.NewsletterSubscription.model_validate(row) for row in rows]

    async def subscribe(self, email: str, name: str | None = None) -> schemas.NewsletterSubscription:
        return schemas.NewsletterSubscription.model_validate(
            await self._request("POST", "/newsletter/subscribe", json={"email": email, "name": name})
        )

    async def unsubscribe(self, email: str) -> None:
        await self._request("POST", "/newsletter/unsubscribe", json={"email": email})
