from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry

from ...dbmodels import Posts
from ...logging import get_logger
from ..context import get_loaders, get_store
from .common import input_payload, invalidate_loaders, translate_not_found

if TYPE_CHECKING:
    from ..mutations.root import ChangePostInput, CreatePostInput
    from ..types.post import Post
    from ..types.user import User

logger = get_logger(__name__)


async def resolve_posts(info: strawberry.Info) -> list[Post]:
    from ..types.post import Post as PostType

    posts = await get_store(info).find_many(Posts)
    return [PostType.from_model(post) for post in posts]


async def resolve_post_by_id(info: strawberry.Info, id: UUID) -> Post | None:
    from ..types.post import Post as PostType

    post = await get_loaders(info).posts.load(id)
    return PostType.from_model(post) if post else None


async def resolve_post_author(post: Post, info: strawberry.Info) -> User | None:
    from ..types.user import User as UserType

    author = await get_loaders(info).users.load(post.author_id)
    return UserType.from_model(author) if author else None


async def create_post(info: strawberry.Info, dto: CreatePostInput) -> Post:
    from ..types.post import Post as PostType

    post = await get_store(info).create(Posts, input_payload(dto))
    invalidate_loaders(info)
    logger.info("Post created", post_id=str(post.id), author_id=str(post.author_id))
    return PostType.from_model(post)


async def change_post(info: strawberry.Info, id: UUID, dto: ChangePostInput) -> Post:
    from ..types.post import Post as PostType

    with translate_not_found():
        post = await get_store(info).update(Posts, id, input_payload(dto, partial=True))
    invalidate_loaders(info)
    return PostType.from_model(post)


async def delete_post(info: strawberry.Info, id: UUID) -> str:
    with translate_not_found():
        await get_store(info).delete(Posts, id)
    invalidate_loaders(info)
    return f"Post id: {id} is deleted"
