"""
Shared pytest fixtures and configuration for all tests.

Integration fixtures run against a throwaway SQLite database (aiosqlite)
created from the ORM metadata, with foreign keys enforced so cascades match
PostgreSQL.
"""

import os
from collections.abc import AsyncGenerator, Generator, Sequence
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from socialgraph.database.connection import (
    create_engine_for_url,
    create_session_factory,
    session_scope,
)
from socialgraph.dbmodels import (
    Base,
    MemberTypes,
    Posts,
    Profiles,
    SubscribersOnAuthors,
    Users,
)
from socialgraph.store import Predicate, SqlAlchemyStore, Store


@dataclass
class FindManyCall:
    kind: type
    where: Predicate | None
    include: tuple[str, ...]


@dataclass
class CountingStore(Store):
    """Store wrapper recording every read so tests can count round trips."""

    inner: Store
    find_many_calls: list[FindManyCall] = field(default_factory=list)
    find_by_id_calls: list[tuple[type, Any]] = field(default_factory=list)

    async def find_by_id(self, kind, ident):
        self.find_by_id_calls.append((kind, ident))
        return await self.inner.find_by_id(kind, ident)

    async def find_many(self, kind, where=None, include: Sequence[str] = ()):
        self.find_many_calls.append(FindManyCall(kind, where, tuple(include)))
        return await self.inner.find_many(kind, where, include)

    async def create(self, kind, payload):
        return await self.inner.create(kind, payload)

    async def update(self, kind, ident, payload):
        return await self.inner.update(kind, ident, payload)

    async def delete(self, kind, ident):
        return await self.inner.delete(kind, ident)

    def calls_for(self, kind: type) -> list[FindManyCall]:
        return [call for call in self.find_many_calls if call.kind is kind]

    def reset(self) -> None:
        self.find_many_calls.clear()
        self.find_by_id_calls.clear()


@dataclass
class SeededGraph:
    """Records created by the ``seeded`` fixture.

    alice follows bob and carol; bob and carol follow alice. alice has a
    BASIC profile and two posts, bob a BUSINESS profile and one post, carol
    neither.
    """

    alice: Users
    bob: Users
    carol: Users
    alice_profile: Profiles
    bob_profile: Profiles
    posts: list[Posts]


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite database with every table created."""
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'socialgraph.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> SqlAlchemyStore:
    return SqlAlchemyStore(partial(session_scope, session_factory))


@pytest.fixture
def counting_store(store: SqlAlchemyStore) -> CountingStore:
    return CountingStore(store)


@pytest_asyncio.fixture(scope="function")
async def member_types(
    session_factory: async_sessionmaker[AsyncSession],
) -> list[MemberTypes]:
    rows = [
        MemberTypes(id="BASIC", discount=2.3, posts_limit_per_month=20),
        MemberTypes(id="BUSINESS", discount=7.7, posts_limit_per_month=100),
    ]
    async with session_scope(session_factory) as session:
        session.add_all(rows)
    return rows


@pytest_asyncio.fixture(scope="function")
async def seeded(
    session_factory: async_sessionmaker[AsyncSession], member_types: list[MemberTypes]
) -> SeededGraph:
    _ = member_types
    alice = Users(name="alice", balance=10.0)
    bob = Users(name="bob", balance=20.0)
    carol = Users(name="carol", balance=30.0)

    async with session_scope(session_factory) as session:
        session.add_all([alice, bob, carol])
        await session.flush()

        alice_profile = Profiles(
            is_male=False, year_of_birth=1990, user_id=alice.id, member_type_id="BASIC"
        )
        bob_profile = Profiles(
            is_male=True, year_of_birth=1985, user_id=bob.id, member_type_id="BUSINESS"
        )
        posts = [
            Posts(title="a1", content="first", author_id=alice.id),
            Posts(title="a2", content="second", author_id=alice.id),
            Posts(title="b1", content="third", author_id=bob.id),
        ]
        session.add_all([alice_profile, bob_profile, *posts])
        session.add_all(
            [
                SubscribersOnAuthors(subscriber_id=alice.id, author_id=bob.id),
                SubscribersOnAuthors(subscriber_id=alice.id, author_id=carol.id),
                SubscribersOnAuthors(subscriber_id=bob.id, author_id=alice.id),
                SubscribersOnAuthors(subscriber_id=carol.id, author_id=alice.id),
            ]
        )

    return SeededGraph(
        alice=alice,
        bob=bob,
        carol=carol,
        alice_profile=alice_profile,
        bob_profile=bob_profile,
        posts=posts,
    )


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
