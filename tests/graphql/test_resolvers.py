"""
Unit tests for resolver functions with a mocked store and loaders
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
import strawberry

from socialgraph.dbmodels import Posts, Profiles, Users
from socialgraph.graphql.errors import NotFoundError
from socialgraph.graphql.mutations.root import ChangeProfileInput, ChangeUserInput, CreateUserInput
from socialgraph.graphql.resolvers.common import input_payload, invalidate_loaders
from socialgraph.graphql.resolvers.post import resolve_post_author
from socialgraph.graphql.resolvers.user import (
    change_user,
    delete_user,
    resolve_user_posts,
    resolve_user_profile,
)
from socialgraph.graphql.types.member_type import MemberTypeId
from socialgraph.graphql.types.post import Post
from socialgraph.graphql.types.user import User
from socialgraph.store import EntityNotFoundError, Store


@pytest.fixture
def mock_store():
    return AsyncMock(spec=Store)


@pytest.fixture
def mock_loaders():
    return MagicMock()


@pytest.fixture
def mock_info(mock_store, mock_loaders):
    """Create a mock GraphQL info object with a store and loaders in context."""
    info = MagicMock(spec=strawberry.Info)
    info.context = {"store": mock_store, "loaders": mock_loaders}
    return info


@pytest.fixture
def sample_user():
    return User(id=uuid.uuid4(), name="alice", balance=10.0)


class TestInputPayload:
    def test_full_payload(self):
        assert input_payload(CreateUserInput(name="bob", balance=2.5)) == {
            "name": "bob",
            "balance": 2.5,
        }

    def test_partial_payload_drops_unset_fields(self):
        assert input_payload(ChangeUserInput(balance=3.0), partial=True) == {"balance": 3.0}

    def test_enums_are_reduced_to_values(self):
        dto = ChangeProfileInput(member_type_id=MemberTypeId.BUSINESS)

        assert input_payload(dto, partial=True) == {"member_type_id": "BUSINESS"}


class TestFieldResolvers:
    @pytest.mark.asyncio
    async def test_user_posts_go_through_the_loader(self, mock_info, mock_loaders, sample_user):
        post = Posts(id=uuid.uuid4(), title="t", content="c", author_id=sample_user.id)
        mock_loaders.posts_by_author.load = AsyncMock(return_value=[post])

        posts = await resolve_user_posts(sample_user, mock_info)

        mock_loaders.posts_by_author.load.assert_awaited_once_with(sample_user.id)
        assert [p.title for p in posts] == ["t"]
        mock_info.context["store"].find_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_profile_is_null(self, mock_info, mock_loaders, sample_user):
        mock_loaders.profile_by_user.load = AsyncMock(return_value=None)

        assert await resolve_user_profile(sample_user, mock_info) is None

    @pytest.mark.asyncio
    async def test_profile_is_converted(self, mock_info, mock_loaders, sample_user):
        profile = Profiles(
            id=uuid.uuid4(),
            is_male=True,
            year_of_birth=1970,
            user_id=sample_user.id,
            member_type_id="BASIC",
        )
        mock_loaders.profile_by_user.load = AsyncMock(return_value=profile)

        result = await resolve_user_profile(sample_user, mock_info)

        assert result.member_type_id is MemberTypeId.BASIC
        assert result.year_of_birth == 1970

    @pytest.mark.asyncio
    async def test_post_author_uses_the_users_loader(self, mock_info, mock_loaders):
        author = Users(id=uuid.uuid4(), name="bob", balance=1.0)
        post = Post(id=uuid.uuid4(), title="t", content="c", author_id=author.id)
        mock_loaders.users.load = AsyncMock(return_value=author)

        result = await resolve_post_author(post, mock_info)

        mock_loaders.users.load.assert_awaited_once_with(author.id)
        assert result.name == "bob"


class TestMutationResolvers:
    @pytest.mark.asyncio
    async def test_change_translates_not_found(self, mock_info, mock_store):
        missing = uuid.uuid4()
        mock_store.update.side_effect = EntityNotFoundError(Users, missing)

        with pytest.raises(NotFoundError) as exc_info:
            await change_user(mock_info, missing, ChangeUserInput(name="x"))

        assert exc_info.value.extensions == {"code": "NOT_FOUND"}
        assert str(missing) in exc_info.value.message

    @pytest.mark.asyncio
    async def test_delete_clears_loader_caches(self, mock_info, mock_store, mock_loaders):
        user_id = uuid.uuid4()
        loader = MagicMock()
        mock_loaders.all.return_value = [loader]

        message = await delete_user(mock_info, user_id)

        mock_store.delete.assert_awaited_once_with(Users, user_id)
        loader.clear_all.assert_called_once_with()
        assert message == f"User id: {user_id} is deleted"

    def test_invalidate_loaders_clears_every_loader(self, mock_info, mock_loaders):
        loaders = [MagicMock(), MagicMock()]
        mock_loaders.all.return_value = loaders

        invalidate_loaders(mock_info)

        for loader in loaders:
            loader.clear_all.assert_called_once_with()
