"""
GraphQL-facing errors
"""

from typing import Any

from graphql import GraphQLError

from ..store import EntityNotFoundError


class NotFoundError(GraphQLError):
    """A mutation targeted a record that does not exist."""

    def __init__(self, kind: str, ident: Any):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} id: {ident} not found", extensions={"code": "NOT_FOUND"})

    @classmethod
    def from_store(cls, error: EntityNotFoundError) -> "NotFoundError":
        return cls(error.kind.__name__.removesuffix("s"), error.ident)
