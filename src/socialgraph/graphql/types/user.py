"""
User GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

from ...dbmodels import Users

if TYPE_CHECKING:
    from .post import Post
    from .profile import Profile


@strawberry.type
class User:
    """User type for GraphQL API."""

    id: UUID
    name: str
    balance: float

    @classmethod
    def from_model(cls, user: Users) -> "User":
        return cls(id=user.id, name=user.name, balance=user.balance)

    @strawberry.field
    async def profile(
        self, info: strawberry.Info
    ) -> Annotated["Profile", strawberry.lazy(".profile")] | None:
        """Get the profile of this user."""
        from ..resolvers.user import resolve_user_profile

        return await resolve_user_profile(self, info)

    @strawberry.field
    async def posts(
        self, info: strawberry.Info
    ) -> list[Annotated["Post", strawberry.lazy(".post")]] | None:
        """Get posts written by this user."""
        from ..resolvers.user import resolve_user_posts

        return await resolve_user_posts(self, info)

    @strawberry.field
    async def user_subscribed_to(self, info: strawberry.Info) -> "list[User] | None":
        """Get authors this user is subscribed to."""
        from ..resolvers.user import resolve_user_subscribed_to

        return await resolve_user_subscribed_to(self, info)

    @strawberry.field
    async def subscribed_to_user(self, info: strawberry.Info) -> "list[User] | None":
        """Get users subscribed to this user."""
        from ..resolvers.user import resolve_subscribed_to_user

        return await resolve_subscribed_to_user(self, info)
