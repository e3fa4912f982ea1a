"""enhanced blog features

Revision ID: 202501200001
Revises: 202501150001
Create Date: 2025-01-20 00:00:01.000000

Adds publication status, analytics and SEO columns to posts, author
verification columns, and the categories, comments, newsletter, series,
bookmark and page-view tables. Column additions are skipped when the column
already exists so the migration can run against databases patched by hand.
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "202501200001"
down_revision = "202501150001"
branch_labels = None
depends_on = None

StringList = sa.JSON().with_variant(postgresql.ARRAY(sa.String()), "postgresql")
IPAddress = sa.String(45).with_variant(postgresql.INET(), "postgresql")


def _add_column_if_missing(table: str, column: sa.Column) -> bool:
    existing = {c["name"] for c in sa.inspect(op.get_bind()).get_columns(table)}
    if column.name in existing:
        return False
    op.add_column(table, column)
    return True


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    is_postgres = op.get_bind().dialect.name == "postgresql"

    # ========================================================================
    # POSTS - status, scheduling, analytics, SEO
    # ========================================================================

    _add_column_if_missing("posts", sa.Column("status", sa.String(20), nullable=False, server_default="published"))
    _add_column_if_missing("posts", sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True))
    _add_column_if_missing("posts", sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"))
    _add_column_if_missing("posts", sa.Column("meta_description", sa.Text(), nullable=True))
    _add_column_if_missing("posts", sa.Column("meta_keywords", StringList, nullable=True))

    with op.batch_alter_table("posts") as batch:
        batch.create_check_constraint(
            "ck_posts_status", "status IN ('draft', 'published', 'archived', 'scheduled')"
        )
        batch.create_check_constraint("ck_posts_view_count_non_negative", "view_count >= 0")
        batch.create_check_constraint("ck_posts_reading_time_positive", "reading_time >= 1")

    op.create_index("ix_posts_status", "posts", ["status"])
    op.create_index("ix_posts_scheduled_at", "posts", ["scheduled_at"])
    op.create_index("ix_posts_view_count_desc", "posts", [sa.text("view_count DESC")])
    op.create_index("ix_posts_updated_at_desc", "posts", [sa.text("updated_at DESC")])

    if is_postgres:
        # Full-text search over title, excerpt and body
        op.execute(
            "CREATE INDEX IF NOT EXISTS ix_posts_search ON posts USING GIN "
            "(to_tsvector('serbian', title || ' ' || excerpt || ' ' || content))"
        )

    # ========================================================================
    # AUTHORS - verification
    # ========================================================================

    _add_column_if_missing("authors", sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()))
    _add_column_if_missing("authors", sa.Column("last_login", sa.DateTime(timezone=True), nullable=True))

    # ========================================================================
    # CATEGORIES
    # ========================================================================

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=False, server_default="#6B7280"),
        sa.Column("icon", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_categories_id", "categories", ["id"])
    op.create_index("ix_categories_slug", "categories", ["slug"], unique=True)

    op.create_table(
        "post_categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("post_id", "category_id", name="uq_post_categories_post_category"),
    )
    op.create_index("ix_post_categories_post_id", "post_categories", ["post_id"])
    op.create_index("ix_post_categories_category_id", "post_categories", ["category_id"])

    # ========================================================================
    # COMMENTS - moderated, threaded
    # ========================================================================

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_name", sa.String(200), nullable=False),
        sa.Column("author_email", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("parent_id", sa.Uuid(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_comments_status"),
    )
    op.create_index("ix_comments_id", "comments", ["id"])
    op.create_index("ix_comments_post_id", "comments", ["post_id"])
    op.create_index("ix_comments_status", "comments", ["status"])
    op.create_index("ix_comments_parent_id", "comments", ["parent_id"])
    op.create_index("ix_comments_created_at", "comments", ["created_at"])

    # ========================================================================
    # NEWSLETTER
    # ========================================================================

    op.create_table(
        "newsletter_subscriptions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("subscribed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("unsubscribed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('active', 'unsubscribed')", name="ck_newsletter_status"),
    )
    op.create_index("ix_newsletter_subscriptions_email", "newsletter_subscriptions", ["email"], unique=True)
    op.create_index("ix_newsletter_subscriptions_status", "newsletter_subscriptions", ["status"])

    # ========================================================================
    # SERIES
    # ========================================================================

    op.create_table(
        "post_series",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image", sa.String(1000), nullable=True),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("authors.id", ondelete="CASCADE"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_post_series_id", "post_series", ["id"])
    op.create_index("ix_post_series_slug", "post_series", ["slug"], unique=True)
    op.create_index("ix_post_series_author_id", "post_series", ["author_id"])

    op.create_table(
        "series_posts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("series_id", sa.Uuid(), sa.ForeignKey("post_series.id", ondelete="CASCADE"), nullable=False),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("series_id", "post_id", name="uq_series_posts_series_post"),
        sa.UniqueConstraint("series_id", "order_index", name="uq_series_posts_series_order"),
    )
    op.create_index("ix_series_posts_series_id", "series_posts", ["series_id"])
    op.create_index("ix_series_posts_post_id", "series_posts", ["post_id"])
    op.create_index("ix_series_posts_order", "series_posts", ["series_id", "order_index"])

    # ========================================================================
    # BOOKMARKS & PAGE VIEWS
    # ========================================================================

    op.create_table(
        "user_bookmarks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "post_id", name="uq_user_bookmarks_user_post"),
    )
    op.create_index("ix_user_bookmarks_user_id", "user_bookmarks", ["user_id"])
    op.create_index("ix_user_bookmarks_post_id", "user_bookmarks", ["post_id"])

    op.create_table(
        "post_views",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("viewer_ip", IPAddress, nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_post_views_post_id", "post_views", ["post_id"])
    op.create_index("ix_post_views_viewed_at", "post_views", ["viewed_at"])


def downgrade() -> None:
    op.drop_table("post_views")
    op.drop_table("user_bookmarks")
    op.drop_table("series_posts")
    op.drop_table("post_series")
    op.drop_table("newsletter_subscriptions")
    op.drop_table("comments")
    op.drop_table("post_categories")
    op.drop_table("categories")

    op.execute("DROP INDEX IF EXISTS ix_posts_search")
    op.drop_index("ix_posts_updated_at_desc", table_name="posts")
    op.drop_index("ix_posts_view_count_desc", table_name="posts")
    op.drop_index("ix_posts_scheduled_at", table_name="posts")
    op.drop_index("ix_posts_status", table_name="posts")
    with op.batch_alter_table("posts") as batch:
        batch.drop_constraint("ck_posts_reading_time_positive", type_="check")
        batch.drop_constraint("ck_posts_view_count_non_negative", type_="check")
        batch.drop_constraint("ck_posts_status", type_="check")
        for column in ("meta_keywords", "meta_description", "view_count", "scheduled_at", "status"):
            batch.drop_column(column)

    with op.batch_alter_table("authors") as batch:
        batch.drop_column("last_login")
        batch.drop_column("verified")
