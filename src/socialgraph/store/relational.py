"""SQLAlchemy-backed store."""

from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from sqlalchemy import ColumnElement, and_, delete, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute, joinedload

from ..logging import get_logger
from .base import ConstraintViolationError, EntityNotFoundError, M, Store, StoreError
from .predicates import And, Eq, In, Predicate, RelatedExists

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _attribute(model: type, name: str) -> InstrumentedAttribute:
    attribute = getattr(model, name, None)
    if not isinstance(attribute, InstrumentedAttribute):
        raise StoreError(f"{model.__name__} has no mapped attribute '{name}'")
    return attribute


def compile_predicate(model: type, predicate: Predicate) -> ColumnElement[bool]:
    """Translate a structured predicate into a SQLAlchemy boolean expression."""
    if isinstance(predicate, Eq):
        return _attribute(model, predicate.field) == predicate.value
    if isinstance(predicate, In):
        return _attribute(model, predicate.field).in_(list(predicate.values))
    if isinstance(predicate, RelatedExists):
        relation = _attribute(model, predicate.relation)
        target = relation.property.mapper.class_
        criterion = compile_predicate(target, predicate.where)
        # EXISTS subquery; any() for collections, has() for many-to-one
        if relation.property.uselist:
            return relation.any(criterion)
        return relation.has(criterion)
    if isinstance(predicate, And):
        return and_(*(compile_predicate(model, p) for p in predicate.predicates))
    raise StoreError(f"Unsupported predicate: {predicate!r}")


class SqlAlchemyStore(Store):
    """Store over SQLAlchemy async sessions.

    Each call opens its own session from ``session_factory`` so that loaders
    dispatching concurrently never share one.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _writing(self, kind: type) -> AsyncIterator[AsyncSession]:
        """Session for one write, committed on exit.

        Constraint failures surface as ``ConstraintViolationError`` so driver
        messages and bound parameters never reach callers.
        """
        try:
            async with self._session_factory() as session:
                yield session
        except IntegrityError as e:
            logger.warning("Write rejected", kind=kind.__name__, error=str(e.orig))
            raise ConstraintViolationError(kind) from e

    async def find_by_id(self, kind: type[M], ident: Any) -> M | None:
        async with self._session_factory() as session:
            return await session.get(kind, ident)

    async def find_many(
        self,
        kind: type[M],
        where: Predicate | None = None,
        include: Sequence[str] = (),
    ) -> list[M]:
        stmt = select(kind)
        if where is not None:
            stmt = stmt.where(compile_predicate(kind, where))
        for name in include:
            stmt = stmt.options(joinedload(_attribute(kind, name)))

        logger.debug("Store fetch", kind=kind.__name__, include=list(include))

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            # unique() is required when collections are joined eagerly
            return list(result.unique().scalars().all())

    async def create(self, kind: type[M], payload: Mapping[str, Any]) -> M:
        async with self._writing(kind) as session:
            record = kind(**payload)
            session.add(record)
            await session.flush()
            logger.info("Record created", kind=kind.__name__)
            return record

    async def update(self, kind: type[M], ident: Any, payload: Mapping[str, Any]) -> M:
        async with self._writing(kind) as session:
            record = await session.get(kind, ident)
            if record is None:
                raise EntityNotFoundError(kind, ident)
            for field, value in payload.items():
                _attribute(kind, field)
                setattr(record, field, value)
            await session.flush()
            logger.info("Record updated", kind=kind.__name__, fields=sorted(payload))
            return record

    async def delete(self, kind: type[M], ident: Any) -> M:
        async with self._writing(kind) as session:
            record = await session.get(kind, ident)
            if record is None:
                raise EntityNotFoundError(kind, ident)

            # Core delete so dependent rows go through the database's ON DELETE CASCADE
            key = ident if isinstance(ident, tuple) else (ident,)
            conditions = [
                column == value
                for column, value in zip(inspect(kind).primary_key, key, strict=True)
            ]
            await session.execute(delete(kind).where(*conditions))
            logger.info("Record deleted", kind=kind.__name__)
            return record
