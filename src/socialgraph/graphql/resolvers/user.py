from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry

from ...dbmodels import SubscribersOnAuthors, Users
from ...logging import get_logger
from ..context import get_loaders, get_store
from ..selection import USER_RELATIONS
from .common import input_payload, invalidate_loaders, translate_not_found

if TYPE_CHECKING:
    from ..mutations.root import ChangeUserInput, CreateUserInput
    from ..types.post import Post
    from ..types.profile import Profile
    from ..types.user import User

logger = get_logger(__name__)


# Query resolvers
async def resolve_users(info: strawberry.Info) -> list[User]:
    """
    Resolve every user.

    When the selection asks for subscription lists, the users are fetched
    together with those lists in one joined query and the subscription
    loaders are primed, so the nested fields never reach the store.
    """
    from ..types.user import User as UserType

    plan = USER_RELATIONS.plan(info.selected_fields)
    users = await get_store(info).find_many(Users, include=[relation.include for relation in plan])
    if plan:
        USER_RELATIONS.prime(get_loaders(info), users, plan)
        logger.debug(
            "Users prefetched", count=len(users), relations=[relation.field for relation in plan]
        )
    return [UserType.from_model(user) for user in users]


async def resolve_user_by_id(info: strawberry.Info, id: UUID) -> User | None:
    from ..types.user import User as UserType

    user = await get_loaders(info).users.load(id)
    return UserType.from_model(user) if user else None


# Field resolvers
async def resolve_user_profile(user: User, info: strawberry.Info) -> Profile | None:
    from ..types.profile import Profile as ProfileType

    profile = await get_loaders(info).profile_by_user.load(user.id)
    return ProfileType.from_model(profile) if profile else None


async def resolve_user_posts(user: User, info: strawberry.Info) -> list[Post]:
    from ..types.post import Post as PostType

    posts = await get_loaders(info).posts_by_author.load(user.id)
    return [PostType.from_model(post) for post in posts]


async def resolve_user_subscribed_to(user: User, info: strawberry.Info) -> list[User]:
    """Authors this user follows."""
    from ..types.user import User as UserType

    authors = await get_loaders(info).authors_followed_by.load(user.id)
    return [UserType.from_model(author) for author in authors]


async def resolve_subscribed_to_user(user: User, info: strawberry.Info) -> list[User]:
    """Users following this user."""
    from ..types.user import User as UserType

    subscribers = await get_loaders(info).subscribers_of.load(user.id)
    return [UserType.from_model(subscriber) for subscriber in subscribers]


# Mutation resolvers
async def create_user(info: strawberry.Info, dto: CreateUserInput) -> User:
    from ..types.user import User as UserType

    user = await get_store(info).create(Users, input_payload(dto))
    invalidate_loaders(info)
    logger.info("User created", user_id=str(user.id))
    return UserType.from_model(user)


async def change_user(info: strawberry.Info, id: UUID, dto: ChangeUserInput) -> User:
    from ..types.user import User as UserType

    with translate_not_found():
        user = await get_store(info).update(Users, id, input_payload(dto, partial=True))
    invalidate_loaders(info)
    return UserType.from_model(user)


async def delete_user(info: strawberry.Info, id: UUID) -> str:
    with translate_not_found():
        await get_store(info).delete(Users, id)
    invalidate_loaders(info)
    return f"User id: {id} is deleted"


async def subscribe_to(info: strawberry.Info, user_id: UUID, author_id: UUID) -> User | None:
    """Make ``user_id`` a subscriber of ``author_id`` and return the subscriber."""
    from ..types.user import User as UserType

    store = get_store(info)
    await store.create(SubscribersOnAuthors, {"subscriber_id": user_id, "author_id": author_id})
    invalidate_loaders(info)
    logger.info("Subscription created", subscriber_id=str(user_id), author_id=str(author_id))

    user = await store.find_by_id(Users, user_id)
    return UserType.from_model(user) if user else None


async def unsubscribe_from(info: strawberry.Info, user_id: UUID, author_id: UUID) -> str:
    with translate_not_found("Subscription"):
        await get_store(info).delete(SubscribersOnAuthors, (user_id, author_id))
    invalidate_loaders(info)
    logger.info("Subscription removed", subscriber_id=str(user_id), author_id=str(author_id))
    return f"User id: {user_id} unsubscribed from {author_id}"
