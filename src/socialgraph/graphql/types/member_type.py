"""
MemberType GraphQL type definitions
"""

from enum import Enum
from typing import TYPE_CHECKING, Annotated

import strawberry

from ...dbmodels import MemberTypes

if TYPE_CHECKING:
    from .profile import Profile


@strawberry.enum
class MemberTypeId(Enum):
    """Membership tier key."""

    BASIC = "BASIC"
    BUSINESS = "BUSINESS"


@strawberry.type
class MemberType:
    """Membership tier."""

    id: MemberTypeId
    discount: float
    posts_limit_per_month: int

    @classmethod
    def from_model(cls, member_type: MemberTypes) -> "MemberType":
        return cls(
            id=MemberTypeId(member_type.id),
            discount=member_type.discount,
            posts_limit_per_month=member_type.posts_limit_per_month,
        )

    @strawberry.field
    async def profiles(
        self, info: strawberry.Info
    ) -> list[Annotated["Profile", strawberry.lazy(".profile")]] | None:
        """Profiles on this tier."""
        from ..resolvers.member_type import resolve_member_type_profiles

        return await resolve_member_type_profiles(self, info)
