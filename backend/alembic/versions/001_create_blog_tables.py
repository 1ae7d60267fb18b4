"""Create blog tables

Revision ID: 001
Revises: None
Create Date: 2025-02-03 00:00:00.000000+00:00

What:  Creates categories, posts, users, likes and comments in the hosted
       project's public schema.
How:   PostgreSQL features: identity primary keys, UUID user ids (mirroring
       auth identities), TIMESTAMP WITH TIME ZONE.

Constraints the API relies on:
    - uq_likes_user_post: a (user_id, post_id) pair is liked at most once;
      POST /api/likes turns the violation into "Already liked this post"
    - categories.name unique: category lookups by name return one row
    - <table>_<column>_fkey names on likes and comments: a 23503 answer tells
      whether the post or the user is missing (→ 404)

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_categories_name"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at("date"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("status_id", sa.Integer(), nullable=True),
        sa.Column(
            "likes_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Maintained by increment_likes / decrement_likes / reconcile_likes_count",
        ),
        sa.Column("category_id", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.CheckConstraint("likes_count >= 0", name="ck_posts_likes_count_non_negative"),
    )
    # Listing is always newest first
    op.create_index("idx_posts_date", "posts", [sa.text("date DESC")])
    op.create_index("idx_posts_category_id", "posts", ["category_id"])

    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Same id as the auth identity",
        ),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("profile_pic", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "likes",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("post_id", sa.BigInteger(), nullable=False),
        _created_at("liked_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="likes_user_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["post_id"], ["posts.id"], ondelete="CASCADE", name="likes_post_id_fkey"
        ),
        sa.UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
    )
    op.create_index("idx_likes_post_id", "likes", ["post_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column("post_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("comment_text", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["post_id"], ["posts.id"], ondelete="CASCADE", name="comments_post_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE", name="comments_user_id_fkey"
        ),
    )
    op.create_index("idx_comments_post_id_created_at", "comments", ["post_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_comments_post_id_created_at", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_likes_post_id", table_name="likes")
    op.drop_table("likes")
    op.drop_table("users")
    op.drop_index("idx_posts_category_id", table_name="posts")
    op.drop_index("idx_posts_date", table_name="posts")
    op.drop_table("posts")
    op.drop_table("categories")
