from collections.abc import Sequence
from functools import partial
from typing import Any
from uuid import UUID

from ..dbmodels import MemberTypes, Posts, Profiles, Users
from ..store import In, RelatedExists, Store
from .dataloader import BatchLoader


def index_by(keys: Sequence[Any], records: Sequence[Any], attribute: str) -> list[Any | None]:
    """Pick the record whose ``attribute`` equals each requested key, or None."""
    by_key = {getattr(record, attribute): record for record in records}
    return [by_key.get(key) for key in keys]


def bucket_by(keys: Sequence[Any], records: Sequence[Any], attribute: str) -> list[list[Any]]:
    """Group records under the requested key they reference; [] when none do."""
    buckets: dict[Any, list[Any]] = {key: [] for key in keys}
    for record in records:
        bucket = buckets.get(getattr(record, attribute))
        if bucket is not None:
            bucket.append(record)
    return [buckets[key] for key in keys]


async def load_users(store: Store, keys: list[UUID]) -> list[Users | None]:
    """Batch load users by ID."""
    users = await store.find_many(Users, In("id", keys))
    return index_by(keys, users, "id")


async def load_member_types(store: Store, keys: list[str]) -> list[MemberTypes | None]:
    """Batch load member types by their enumerated key."""
    member_types = await store.find_many(MemberTypes, In("id", keys))
    return index_by(keys, member_types, "id")


async def load_posts(store: Store, keys: list[UUID]) -> list[Posts | None]:
    """Batch load posts by ID."""
    posts = await store.find_many(Posts, In("id", keys))
    return index_by(keys, posts, "id")


async def load_profiles(store: Store, keys: list[UUID]) -> list[Profiles | None]:
    """Batch load profiles by ID."""
    profiles = await store.find_many(Profiles, In("id", keys))
    return index_by(keys, profiles, "id")


async def load_profiles_by_member_type(store: Store, keys: list[str]) -> list[list[Profiles]]:
    """Batch load the profiles on each member type."""
    profiles = await store.find_many(Profiles, In("member_type_id", keys))
    return bucket_by(keys, profiles, "member_type_id")


async def load_posts_by_author(store: Store, keys: list[UUID]) -> list[list[Posts]]:
    """Batch load the posts written by each user."""
    posts = await store.find_many(Posts, In("author_id", keys))
    return bucket_by(keys, posts, "author_id")


async def load_profile_by_user(store: Store, keys: list[UUID]) -> list[Profiles | None]:
    """Batch load each user's profile (user_id is unique on profiles)."""
    profiles = await store.find_many(Profiles, In("user_id", keys))
    return index_by(keys, profiles, "user_id")


async def load_authors_followed_by(store: Store, keys: list[UUID]) -> list[list[Users]]:
    """Batch load the authors each subscriber follows.

    One query fetches every author with at least one requested subscriber,
    together with its subscription edges; each author is then handed to the
    subscribers named on those edges.
    """
    authors = await store.find_many(
        Users,
        RelatedExists("subscriptions_as_author", In("subscriber_id", keys)),
        include=["subscriptions_as_author"],
    )
    followed: dict[UUID, list[Users]] = {key: [] for key in keys}
    for author in authors:
        for edge in author.subscriptions_as_author:
            bucket = followed.get(edge.subscriber_id)
            if bucket is not None:
                bucket.append(author)
    return [followed[key] for key in keys]


async def load_subscribers_of(store: Store, keys: list[UUID]) -> list[list[Users]]:
    """Batch load the subscribers of each author."""
    subscribers = await store.find_many(
        Users,
        RelatedExists("subscriptions_as_subscriber", In("author_id", keys)),
        include=["subscriptions_as_subscriber"],
    )
    followers: dict[UUID, list[Users]] = {key: [] for key in keys}
    for subscriber in subscribers:
        for edge in subscriber.subscriptions_as_subscriber:
            bucket = followers.get(edge.author_id)
            if bucket is not None:
                bucket.append(subscriber)
    return [followers[key] for key in keys]


class Loaders:
    """Every batch loader one request may use, all bound to the same store.

    Build a new instance per request; cached values must not outlive it.
    """

    def __init__(self, store: Store):
        self.users = BatchLoader(partial(load_users, store), name="users")
        self.member_types = BatchLoader(partial(load_member_types, store), name="member_types")
        self.posts = BatchLoader(partial(load_posts, store), name="posts")
        self.profiles = BatchLoader(partial(load_profiles, store), name="profiles")
        self.profiles_by_member_type = BatchLoader(
            partial(load_profiles_by_member_type, store), name="profiles_by_member_type"
        )
        self.posts_by_author = BatchLoader(
            partial(load_posts_by_author, store), name="posts_by_author"
        )
        self.profile_by_user = BatchLoader(
            partial(load_profile_by_user, store), name="profile_by_user"
        )
        self.authors_followed_by = BatchLoader(
            partial(load_authors_followed_by, store), name="authors_followed_by"
        )
        self.subscribers_of = BatchLoader(
            partial(load_subscribers_of, store), name="subscribers_of"
        )

    def all(self) -> list[BatchLoader]:
        """Every loader in the registry."""
        return [value for value in vars(self).values() if isinstance(value, BatchLoader)]
