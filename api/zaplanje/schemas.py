from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

PostStatus = Literal["draft", "published", "archived", "scheduled"]
CommentStatus = Literal["pending", "approved", "rejected"]
SubscriptionStatus = Literal["active", "unsubscribed"]
SortKey = Literal["newest", "oldest", "popular"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ============================================================================
# BASE SCHEMAS
# ============================================================================


class Problem(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs."""

    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"
    uptime_s: float | None = None


# ============================================================================
# AUTHORS
# ============================================================================


class SocialLinks(BaseModel):
    website: str | None = None
    twitter: str | None = None
    linkedin: str | None = None


class Author(BaseModel):
    id: UUID
    name: str
    bio: str
    avatar: str
    email: str
    social_links: SocialLinks | None = None
    verified: bool = False
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    bio: str = Field("", max_length=5000)
    avatar: str = Field("", max_length=1000)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    social_links: SocialLinks | None = None
    verified: bool = False


class AuthorUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    bio: str | None = Field(None, max_length=5000)
    avatar: str | None = Field(None, max_length=1000)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    social_links: SocialLinks | None = None
    verified: bool | None = None


# ============================================================================
# POSTS
# ============================================================================


class Post(BaseModel):
    """Post as served to readers."""

    id: UUID
    title: str
    slug: str
    excerpt: str
    content: str
    cover_image: str
    author_id: UUID | None = None
    published_at: datetime | None = None
    reading_time: int
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    view_count: int = 0
    status: PostStatus
    scheduled_at: datetime | None = None
    meta_description: str | None = None
    meta_keywords: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostCreate(BaseModel):
    """Create post request. Slug, excerpt and reading time are derived when omitted."""

    title: str = Field(..., min_length=1, max_length=300)
    slug: str | None = Field(None, min_length=1, max_length=300, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    excerpt: str | None = Field(None, max_length=2000)
    content: str = ""
    cover_image: str = Field("", max_length=1000)
    author_id: UUID | None = None
    published_at: datetime | None = None
    reading_time: int | None = Field(None, ge=1)
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    status: PostStatus = "draft"
    scheduled_at: datetime | None = None
    meta_description: str | None = None
    meta_keywords: list[str] | None = None


class PostUpdate(BaseModel):
    """Partial update: only fields present in the request body change."""

    title: str | None = Field(None, min_length=1, max_length=300)
    slug: str | None = Field(None, min_length=1, max_length=300, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    excerpt: str | None = Field(None, max_length=2000)
    content: str | None = None
    cover_image: str | None = Field(None, max_length=1000)
    author_id: UUID | None = None
    published_at: datetime | None = None
    reading_time: int | None = Field(None, ge=1)
    tags: list[str] | None = None
    featured: bool | None = None
    status: PostStatus | None = None
    scheduled_at: datetime | None = None
    meta_description: str | None = None
    meta_keywords: list[str] | None = None


class SearchResult(Post):
    """Post annotated with its full-text rank."""

    rank: float


class ViewRecordRequest(BaseModel):
    """Client-supplied view metadata. The viewer IP is taken from the request."""

    user_agent: str | None = Field(None, max_length=1000)
    referrer: str | None = Field(None, max_length=2000)


class ViewRecordResponse(BaseModel):
    post_id: UUID
    view_count: int


class PostCategoryAssign(BaseModel):
    category_ids: list[UUID]


# ============================================================================
# CATEGORIES
# ============================================================================


class Category(BaseModel):
    id: UUID
    name: str
    slug: str
    description: str | None = None
    color: str
    icon: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    color: str = Field("#6B7280", pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: str | None = Field(None, max_length=50)


class PostCategoryLink(BaseModel):
    id: UUID
    post_id: UUID
    category_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# COMMENTS
# ============================================================================


class Comment(BaseModel):
    """Public comment. The author's email is never echoed back."""

    id: UUID
    post_id: UUID
    author_name: str
    content: str
    status: CommentStatus
    parent_id: UUID | None = None
    created_at: datetime
    children: list["Comment"] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class CommentCreate(BaseModel):
    author_name: str = Field(..., min_length=1, max_length=200)
    author_email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: UUID | None = None


class CommentModerate(BaseModel):
    status: CommentStatus


# ============================================================================
# NEWSLETTER
# ============================================================================


class NewsletterSubscription(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    status: SubscriptionStatus
    subscribed_at: datetime
    unsubscribed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class NewsletterSubscribe(BaseModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    name: str | None = Field(None, max_length=200)


class NewsletterUnsubscribe(BaseModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


# ============================================================================
# SERIES
# ============================================================================


class SeriesBase(BaseModel):
    id: UUID
    title: str
    slug: str
    description: str | None = None
    cover_image: str | None = None
    author_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SeriesEntry(BaseModel):
    order_index: int
    post: Post

    model_config = ConfigDict(from_attributes=True)


class Series(SeriesBase):
    posts: list[SeriesEntry] = Field(default_factory=list)


class SeriesCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    slug: str | None = Field(None, min_length=1, max_length=300)
    description: str | None = None
    cover_image: str | None = None
    author_id: UUID | None = None


class SeriesPostAdd(BaseModel):
    post_id: UUID
    order_index: int = Field(..., ge=0)


# ============================================================================
# BOOKMARKS
# ============================================================================


class Bookmark(BaseModel):
    id: UUID
    user_id: UUID
    post_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookmarkCreate(BaseModel):
    post_id: UUID
