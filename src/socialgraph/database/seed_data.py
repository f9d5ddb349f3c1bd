"""
Seed data for the membership tiers and an optional sample network.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..dbmodels import MemberTypes, Posts, Profiles, SubscribersOnAuthors, Users
from ..logging import get_logger

logger = get_logger(__name__)

MEMBER_TYPES: dict[str, tuple[float, int]] = {
    "BASIC": (2.3, 20),
    "BUSINESS": (7.7, 100),
}


async def ensure_member_types(db: AsyncSession) -> int:
    """
    Create any missing membership tier.

    Existing tiers are left untouched, so this is safe to run repeatedly.

    Returns:
        Number of tiers created
    """
    result = await db.execute(select(MemberTypes.id))
    existing = set(result.scalars().all())

    created = 0
    for key, (discount, posts_limit) in MEMBER_TYPES.items():
        if key in existing:
            logger.debug("Member type already exists", member_type_id=key)
            continue
        db.add(MemberTypes(id=key, discount=discount, posts_limit_per_month=posts_limit))
        created += 1

    await db.flush()
    logger.info("Member types ensured", created=created)
    return created


async def seed_sample_data(db: AsyncSession) -> list[Users]:
    """Create three users who follow each other in a ring, each with a profile and a post."""
    users = [
        Users(name=name, balance=balance)
        for name, balance in (("Ada", 120.5), ("Grace", 80.0), ("Linus", 42.0))
    ]
    db.add_all(users)
    await db.flush()

    for index, user in enumerate(users):
        db.add(
            Profiles(
                is_male=user.name == "Linus",
                year_of_birth=1980 + index,
                user_id=user.id,
                member_type_id="BUSINESS" if index == 0 else "BASIC",
            )
        )
        db.add(Posts(title=f"Hello from {user.name}", content="First post.", author_id=user.id))
        author = users[(index + 1) % len(users)]
        db.add(SubscribersOnAuthors(subscriber_id=user.id, author_id=author.id))

    await db.flush()
    logger.info("Sample data created", users=len(users))
    return users
