"""Seed the membership tiers

Profiles reference member types by key, so both tiers must exist before the
first profile is created. Existing rows are left untouched.

Revision ID: 20250102_000000_seed_member_types
Revises: 20250101_000000_initial_schema
Create Date: 2025-01-02 00:00:00

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20250102_000000_seed_member_types"
down_revision: str | Sequence[str] | None = "20250101_000000_initial_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MEMBER_TYPES = [
    {"id": "BASIC", "discount": 2.3, "posts_limit_per_month": 20},
    {"id": "BUSINESS", "discount": 7.7, "posts_limit_per_month": 100},
]


def upgrade() -> None:
    """Insert BASIC and BUSINESS if missing."""
    connection = op.get_bind()

    for member_type in MEMBER_TYPES:
        existing = connection.execute(
            sa.text("SELECT id FROM member_types WHERE id = :id"),
            {"id": member_type["id"]},
        ).fetchone()
        if existing:
            continue
        connection.execute(
            sa.text(
                """
                INSERT INTO member_types (id, discount, posts_limit_per_month)
                VALUES (:id, :discount, :posts_limit_per_month)
                """
            ),
            member_type,
        )


def downgrade() -> None:
    connection = op.get_bind()
    connection.execute(
        sa.text("DELETE FROM member_types WHERE id IN ('BASIC', 'BUSINESS')")
    )
