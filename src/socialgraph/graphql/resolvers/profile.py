from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry

from ...dbmodels import Profiles
from ...logging import get_logger
from ..context import get_loaders, get_store
from .common import input_payload, invalidate_loaders, translate_not_found

if TYPE_CHECKING:
    from ..mutations.root import ChangeProfileInput, CreateProfileInput
    from ..types.member_type import MemberType
    from ..types.profile import Profile
    from ..types.user import User

logger = get_logger(__name__)


async def resolve_profiles(info: strawberry.Info) -> list[Profile]:
    from ..types.profile import Profile as ProfileType

    profiles = await get_store(info).find_many(Profiles)
    return [ProfileType.from_model(profile) for profile in profiles]


async def resolve_profile_by_id(info: strawberry.Info, id: UUID) -> Profile | None:
    from ..types.profile import Profile as ProfileType

    profile = await get_loaders(info).profiles.load(id)
    return ProfileType.from_model(profile) if profile else None


async def resolve_profile_user(profile: Profile, info: strawberry.Info) -> User | None:
    from ..types.user import User as UserType

    user = await get_loaders(info).users.load(profile.user_id)
    return UserType.from_model(user) if user else None


async def resolve_profile_member_type(profile: Profile, info: strawberry.Info) -> MemberType | None:
    from ..types.member_type import MemberType as MemberTypeType

    member_type = await get_loaders(info).member_types.load(profile.member_type_id.value)
    return MemberTypeType.from_model(member_type) if member_type else None


async def create_profile(info: strawberry.Info, dto: CreateProfileInput) -> Profile:
    from ..types.profile import Profile as ProfileType

    profile = await get_store(info).create(Profiles, input_payload(dto))
    invalidate_loaders(info)
    logger.info("Profile created", profile_id=str(profile.id), user_id=str(profile.user_id))
    return ProfileType.from_model(profile)


async def change_profile(info: strawberry.Info, id: UUID, dto: ChangeProfileInput) -> Profile:
    from ..types.profile import Profile as ProfileType

    with translate_not_found():
        profile = await get_store(info).update(Profiles, id, input_payload(dto, partial=True))
    invalidate_loaders(info)
    return ProfileType.from_model(profile)


async def delete_profile(info: strawberry.Info, id: UUID) -> str:
    with translate_not_found():
        await get_store(info).delete(Profiles, id)
    invalidate_loaders(info)
    return f"Profile id: {id} is deleted"
