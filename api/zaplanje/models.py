from __future__ import annotations

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, INET
from sqlalchemy.orm import relationship, backref

from .db import Base

# Native arrays and inet on PostgreSQL, portable fallbacks elsewhere (SQLite in tests).
StringList = JSON().with_variant(ARRAY(String), "postgresql")
IPAddress = String(45).with_variant(INET(), "postgresql")

POST_STATUSES = ("draft", "published", "archived", "scheduled")
COMMENT_STATUSES = ("pending", "approved", "rejected")
SUBSCRIPTION_STATUSES = ("active", "unsubscribed")


# ============================================================================
# CORE ENTITIES
# ============================================================================


class Author(Base):
    """Author profile; owns posts and series."""

    __tablename__ = "authors"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(200), nullable=False)
    bio = Column(Text, nullable=False, default="")
    avatar = Column(String(1000), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    social_links = Column(JSON, nullable=True)  # {"website": ..., "twitter": ..., "linkedin": ...}
    verified = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    posts = relationship("Post", back_populates="author", passive_deletes=True)
    series = relationship(
        "PostSeries", back_populates="author", cascade="all, delete-orphan", passive_deletes=True
    )


class Post(Base):
    """Blog article. Publicly listed only while published and past its publication time."""

    __tablename__ = "posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False, unique=True, index=True)
    excerpt = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False, default="")  # Rich text (HTML)
    cover_image = Column(String(1000), nullable=False, default="")
    author_id = Column(
        Uuid, ForeignKey("authors.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Publication
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)  # NULL = not yet published
    status = Column(String(20), nullable=False, default="published", index=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Presentation
    reading_time = Column(Integer, nullable=False, default=1)  # Minutes
    tags = Column(StringList, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False, index=True)

    # Analytics
    view_count = Column(Integer, nullable=False, default=0)

    # SEO
    meta_description = Column(Text, nullable=True)
    meta_keywords = Column(StringList, nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    author = relationship("Author", back_populates="posts")
    category_links = relationship(
        "PostCategory", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    comments = relationship(
        "Comment", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    series_entries = relationship(
        "SeriesPost", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    bookmarks = relationship(
        "UserBookmark", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )
    views = relationship(
        "PostView", back_populates="post", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'archived', 'scheduled')", name="ck_posts_status"
        ),
        CheckConstraint("view_count >= 0", name="ck_posts_view_count_non_negative"),
        CheckConstraint("reading_time >= 1", name="ck_posts_reading_time_positive"),
        Index("ix_posts_view_count_desc", view_count.desc()),
        Index("ix_posts_updated_at_desc", updated_at.desc()),
    )


# ============================================================================
# CATEGORIES
# ============================================================================


class Category(Base):
    """Topic a post can be filed under (many-to-many via post_categories)."""

    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False, unique=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=False, default="#6B7280")
    icon = Column(String(50), nullable=True)  # Lucide icon name

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    post_links = relationship(
        "PostCategory", back_populates="category", cascade="all, delete-orphan", passive_deletes=True
    )


class PostCategory(Base):
    """Join row between a post and a category."""

    __tablename__ = "post_categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id = Column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(
        Uuid, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    post = relationship("Post", back_populates="category_links")
    category = relationship("Category", back_populates="post_links")

    __table_args__ = (
        UniqueConstraint("post_id", "category_id", name="uq_post_categories_post_category"),
    )


# ============================================================================
# COMMENTS
# ============================================================================


class Comment(Base):
    """Reader comment. Unauthenticated; public only once approved."""

    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    post_id = Column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_name = Column(String(200), nullable=False)
    author_email = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    parent_id = Column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True
    )

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    post = relationship("Post", back_populates="comments")
    replies = relationship(
        "Comment",
        backref=backref("parent", remote_side=[id]),
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_comments_status"
        ),
    )


# ============================================================================
# NEWSLETTER
# ============================================================================


class NewsletterSubscription(Base):
    """Newsletter signup, one row per email address."""

    __tablename__ = "newsletter_subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    subscribed_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    unsubscribed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'unsubscribed')", name="ck_newsletter_status"
        ),
    )


# ============================================================================
# SERIES
# ============================================================================


class PostSeries(Base):
    """Ordered collection of posts by one author."""

    __tablename__ = "post_series"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    cover_image = Column(String(1000), nullable=True)
    author_id = Column(
        Uuid, ForeignKey("authors.id", ondelete="CASCADE"), nullable=True, index=True
    )

    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    author = relationship("Author", back_populates="series")
    entries = relationship(
        "SeriesPost",
        back_populates="series",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SeriesPost.order_index",
    )


class SeriesPost(Base):
    """Position of a post within a series."""

    __tablename__ = "series_posts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    series_id = Column(
        Uuid, ForeignKey("post_series.id", ondelete="CASCADE"), nullable=False, index=True
    )
    post_id = Column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_index = Column(Integer, nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    series = relationship("PostSeries", back_populates="entries")
    post = relationship("Post", back_populates="series_entries")

    __table_args__ = (
        UniqueConstraint("series_id", "post_id", name="uq_series_posts_series_post"),
        UniqueConstraint("series_id", "order_index", name="uq_series_posts_series_order"),
        Index("ix_series_posts_order", series_id, order_index),
    )


# ============================================================================
# READER STATE & ANALYTICS
# ============================================================================


class UserBookmark(Base):
    """Post saved by a signed-in reader. Visible to its owner only."""

    __tablename__ = "user_bookmarks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)  # Subject of the caller's access token
    post_id = Column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    post = relationship("Post", back_populates="bookmarks")

    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_user_bookmarks_user_post"),
    )


class PostView(Base):
    """Append-only page view record."""

    __tablename__ = "post_views"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id = Column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    viewer_ip = Column(IPAddress, nullable=True)
    user_agent = Column(Text, nullable=True)
    referrer = Column(Text, nullable=True)
    viewed_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    post = relationship("Post", back_populates="views")
