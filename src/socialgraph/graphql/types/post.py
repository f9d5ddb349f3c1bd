"""
Post GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

from ...dbmodels import Posts

if TYPE_CHECKING:
    from .user import User


@strawberry.type
class Post:
    """Post type for GraphQL API."""

    id: UUID
    title: str
    content: str
    author_id: UUID

    @classmethod
    def from_model(cls, post: Posts) -> "Post":
        return cls(id=post.id, title=post.title, content=post.content, author_id=post.author_id)

    @strawberry.field
    async def author(self, info: strawberry.Info) -> Annotated["User", strawberry.lazy(".user")] | None:
        """Author of this post."""
        from ..resolvers.post import resolve_post_author

        return await resolve_post_author(self, info)
