from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...dbmodels import MemberTypes
from ..context import get_loaders, get_store

if TYPE_CHECKING:
    from ..types.member_type import MemberType, MemberTypeId
    from ..types.profile import Profile


async def resolve_member_types(info: strawberry.Info) -> list[MemberType]:
    from ..types.member_type import MemberType as MemberTypeType

    member_types = await get_store(info).find_many(MemberTypes)
    return [MemberTypeType.from_model(member_type) for member_type in member_types]


async def resolve_member_type_by_id(info: strawberry.Info, id: MemberTypeId) -> MemberType | None:
    from ..types.member_type import MemberType as MemberTypeType

    member_type = await get_loaders(info).member_types.load(id.value)
    return MemberTypeType.from_model(member_type) if member_type else None


async def resolve_member_type_profiles(
    member_type: MemberType, info: strawberry.Info
) -> list[Profile]:
    """Profiles on this tier, batched across every member type in the response."""
    from ..types.profile import Profile as ProfileType

    profiles = await get_loaders(info).profiles_by_member_type.load(member_type.id.value)
    return [ProfileType.from_model(profile) for profile in profiles]
