"""
Profile GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

from ...dbmodels import Profiles
from .member_type import MemberTypeId

if TYPE_CHECKING:
    from .member_type import MemberType
    from .user import User


@strawberry.type
class Profile:
    """User profile."""

    id: UUID
    is_male: bool
    year_of_birth: int
    user_id: UUID
    member_type_id: MemberTypeId

    @classmethod
    def from_model(cls, profile: Profiles) -> "Profile":
        return cls(
            id=profile.id,
            is_male=profile.is_male,
            year_of_birth=profile.year_of_birth,
            user_id=profile.user_id,
            member_type_id=MemberTypeId(profile.member_type_id),
        )

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Annotated["User", strawberry.lazy(".user")] | None:
        """Owner of this profile."""
        from ..resolvers.profile import resolve_profile_user

        return await resolve_profile_user(self, info)

    @strawberry.field
    async def member_type(
        self, info: strawberry.Info
    ) -> Annotated["MemberType", strawberry.lazy(".member_type")] | None:
        """Membership tier of this profile."""
        from ..resolvers.profile import resolve_profile_member_type

        return await resolve_profile_member_type(self, info)
