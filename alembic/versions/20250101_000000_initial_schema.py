"""
Initial schema: users, member types, profiles, posts and subscriptions.

Revision ID: 20250101_000000_initial_schema
Revises:
Create Date: 2025-01-01 00:00:00
"""

import sqlalchemy as sa

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20250101_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # member_types
    op.create_table(
        "member_types",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("discount", sa.Float(), nullable=False),
        sa.Column("posts_limit_per_month", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="member_types_pkey"),
    )

    # users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("balance", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
    )

    # profiles (at most one per user)
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("is_male", sa.Boolean(), nullable=False),
        sa.Column("year_of_birth", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("member_type_id", sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="profiles_user_id_fkey", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["member_type_id"], ["member_types.id"], name="profiles_member_type_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="profiles_pkey"),
        sa.UniqueConstraint("user_id", name="profiles_user_id_key"),
    )
    op.create_index("idx_profiles_member_type", "profiles", ["member_type_id"])

    # posts
    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["author_id"], ["users.id"], name="posts_author_id_fkey", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="posts_pkey"),
    )
    op.create_index("idx_posts_author", "posts", ["author_id"])

    # subscribers_on_authors (subscription edges)
    op.create_table(
        "subscribers_on_authors",
        sa.Column("subscriber_id", sa.Uuid(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["subscriber_id"],
            ["users.id"],
            name="subscribers_on_authors_subscriber_id_fkey",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["author_id"],
            ["users.id"],
            name="subscribers_on_authors_author_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("subscriber_id", "author_id", name="subscribers_on_authors_pkey"),
    )
    op.create_index("idx_subscribers_on_authors_author", "subscribers_on_authors", ["author_id"])


def downgrade() -> None:
    op.drop_index("idx_subscribers_on_authors_author", table_name="subscribers_on_authors")
    op.drop_table("subscribers_on_authors")
    op.drop_index("idx_posts_author", table_name="posts")
    op.drop_table("posts")
    op.drop_index("idx_profiles_member_type", table_name="profiles")
    op.drop_table("profiles")
    op.drop_table("users")
    op.drop_table("member_types")
