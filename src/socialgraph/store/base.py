"""Store interface consumed by the GraphQL resolution layer."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from .predicates import Predicate

M = TypeVar("M")


class StoreError(Exception):
    """Base exception for store operations."""

    pass


class EntityNotFoundError(StoreError):
    """Raised when an update or delete targets a record that does not exist."""

    def __init__(self, kind: type, ident: Any):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind.__name__} {ident} not found")


class ConstraintViolationError(StoreError):
    """Raised when a write breaks a foreign key, unique or primary key constraint."""

    def __init__(self, kind: type):
        self.kind = kind
        super().__init__(f"{kind.__name__} write violates a database constraint")


class Store(ABC):
    """Abstract persistence collaborator.

    Every call is independent: there is no shared transaction between calls
    and no write batching. Reads may run concurrently.
    """

    @abstractmethod
    async def find_by_id(self, kind: type[M], ident: Any) -> M | None:
        """Fetch one record by primary key, or None."""
        pass

    @abstractmethod
    async def find_many(
        self,
        kind: type[M],
        where: Predicate | None = None,
        include: Sequence[str] = (),
    ) -> list[M]:
        """Fetch every record matching ``where``.

        Args:
            kind: Model class to query
            where: Optional structured predicate
            include: Relationship names loaded in the same statement

        Returns:
            Matching records
        """
        pass

    @abstractmethod
    async def create(self, kind: type[M], payload: Mapping[str, Any]) -> M:
        """Insert a record and return it.

        Raises:
            ConstraintViolationError: If the row breaks a key or foreign key
        """
        pass

    @abstractmethod
    async def update(self, kind: type[M], ident: Any, payload: Mapping[str, Any]) -> M:
        """Apply ``payload`` to an existing record.

        Raises:
            EntityNotFoundError: If no record has this key
            ConstraintViolationError: If the change breaks a constraint
        """
        pass

    @abstractmethod
    async def delete(self, kind: type[M], ident: Any) -> M:
        """Delete a record and return it as it was.

        Raises:
            EntityNotFoundError: If no record has this key
        """
        pass
